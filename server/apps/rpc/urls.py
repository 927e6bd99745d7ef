from django.urls import path

from server.apps.rpc import views

app_name = 'rpc'

urlpatterns = [
    path('issueToken', views.issue_token_view, name='issueToken'),
    path('refreshToken', views.refresh_token_view, name='refreshToken'),
    path('listFiles', views.list_files_view, name='listFiles'),
    path('uploadFile', views.upload_file_view, name='uploadFile'),
    path('deleteFiles', views.delete_files_view, name='deleteFiles'),
    path('listGCPFiles', views.list_gcp_files_view, name='listGCPFiles'),
    path(
        'uploadToGCPBucket',
        views.upload_to_gcp_bucket_view,
        name='uploadToGCPBucket',
    ),
    path(
        'downloadFromGCPBucket',
        views.download_from_gcp_bucket_view,
        name='downloadFromGCPBucket',
    ),
    path('grantGCPAccess', views.grant_gcp_access_view, name='grantGCPAccess'),
    path(
        'setCustomAdminClaims',
        views.set_custom_admin_claims_view,
        name='setCustomAdminClaims',
    ),
    path('fetchUsers', views.fetch_users_view, name='fetchUsers'),
    path(
        'resetUserPassword',
        views.reset_user_password_view,
        name='resetUserPassword',
    ),
    path(
        'disableUserAccount',
        views.disable_user_account_view,
        name='disableUserAccount',
    ),
    path(
        'enableUserAccount',
        views.enable_user_account_view,
        name='enableUserAccount',
    ),
    path(
        'deleteUserAccount',
        views.delete_user_account_view,
        name='deleteUserAccount',
    ),
]
