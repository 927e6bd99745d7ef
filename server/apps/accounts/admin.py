"""Django admin configuration for accounts app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.accounts.models import Account


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin[Account]):
    """Admin interface for Account model."""

    list_display = [
        'uid',
        'email_display',
        'is_admin',
        'has_tier_access',
        'disabled_display',
        'created_at',
    ]

    list_filter = [
        'is_admin',
        'has_tier_access',
        'user__is_active',
    ]

    search_fields = [
        'uid',
        'user__email',
        'user__username',
    ]

    readonly_fields = [
        'uid',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Identity', {
            'fields': ('uid', 'user'),
        }),
        ('Claims', {
            'fields': ('is_admin', 'has_tier_access'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def email_display(self, obj: Account) -> str:
        """Display email of the auth user.

        Args:
            obj: Account instance.

        Returns:
            Email address.
        """
        return obj.email
    email_display.short_description = 'Email'  # type: ignore[attr-defined]

    def disabled_display(self, obj: Account) -> bool:
        """Display whether the account is disabled."""
        return obj.disabled
    disabled_display.short_description = 'Disabled'  # type: ignore[attr-defined]
    disabled_display.boolean = True  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Account]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user')
