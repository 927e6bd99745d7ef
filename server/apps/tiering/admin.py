"""Django admin configuration for tiering app."""

from django.contrib import admin

from server.apps.tiering.models import ColdFileRecord


@admin.register(ColdFileRecord)
class ColdFileRecordAdmin(admin.ModelAdmin[ColdFileRecord]):
    """Admin interface for the cold-tier metadata index."""

    list_display = [
        'file_name',
        'account_id',
        'archived_at',
    ]

    list_filter = [
        'archived_at',
    ]

    search_fields = [
        'account_id',
        'file_name',
    ]

    # Entries mirror the bucket and are written by transfers only
    readonly_fields = [
        'account_id',
        'file_name',
        'url',
        'archived_at',
    ]
