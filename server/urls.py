"""Root URL configuration.

Callable endpoints live under ``/rpc/<name>``; the Django admin under
``/admin/``.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('rpc/', include('server.apps.rpc.urls')),
]
