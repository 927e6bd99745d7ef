"""Database models for accounts app."""

import secrets
from typing import Final, final, override

from django.conf import settings
from django.db import models

# Opaque account identifiers: 21 random bytes -> 28 url-safe characters
_UID_BYTES: Final = 21
_UID_MAX_LENGTH: Final = 64

# Claim names carried in session tokens
ADMIN_CLAIM: Final = 'admin'
TIER_ACCESS_CLAIM: Final = 'gcpAccess'


def generate_account_uid() -> str:
    """Generate a new opaque account identifier.

    Returns:
        URL-safe random string, stable for the account lifetime.
    """
    return secrets.token_urlsafe(_UID_BYTES)


@final
class Account(models.Model):
    """Identity & claims record attached to an auth user.

    The auth user keeps credentials, email and the active flag
    (``disabled`` is its inverse). This record owns the opaque account
    identifier used as the storage namespace prefix and the role flags
    that are embedded as claims in session tokens.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='account',
        primary_key=True,
    )

    uid = models.CharField(
        max_length=_UID_MAX_LENGTH,
        unique=True,
        default=generate_account_uid,
        editable=False,
        help_text='Opaque account id, storage prefix: {uid}/file.ext',
    )

    is_admin = models.BooleanField(
        default=False,
        help_text='Administrator claim',
    )

    has_tier_access = models.BooleanField(
        default=False,
        help_text='Cold tier access claim',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Account'  # type: ignore[mutable-override]
        verbose_name_plural = 'Accounts'  # type: ignore[mutable-override]
        ordering = ['user_id']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.email or self.user.username} ({self.uid})'

    @property
    def email(self) -> str:
        """Email of the underlying auth user."""
        return self.user.email

    @property
    def disabled(self) -> bool:
        """Whether the underlying auth user is disabled."""
        return not self.user.is_active

    def get_claims(self) -> dict[str, bool]:
        """Build the claim set embedded in session tokens.

        Returns:
            Mapping of claim name to value.
        """
        return {
            ADMIN_CLAIM: self.is_admin,
            TIER_ACCESS_CLAIM: self.has_tier_access,
        }
