"""Business logic for the identity & claims store."""

import logging
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from server.apps.accounts.models import Account
from server.common.errors import InvalidArgumentError, NotFoundError

# User type for Django's dynamic user model
_User = Any

User = get_user_model()
logger = logging.getLogger(__name__)


def _email_domain(email: str) -> str:
    return email.rpartition('@')[2].lower()


def is_auto_grant_email(email: str) -> bool:
    """Check if new accounts with this email get tier access immediately.

    Args:
        email: Account email.

    Returns:
        True if the email domain is in ``ACCOUNTS_AUTO_GRANT_DOMAINS``.
    """
    if not email or '@' not in email:
        return False
    domains = {
        domain.lower().lstrip('@')
        for domain in settings.ACCOUNTS_AUTO_GRANT_DOMAINS
    }
    return _email_domain(email) in domains


def ensure_account(user: _User) -> Account:
    """Get or create the claims record for an auth user.

    New records start without the administrator claim. Tier access is
    granted on creation only for auto-grant email domains.

    Args:
        user: Auth user.

    Returns:
        Account for the user.
    """
    account, created = Account.objects.select_related('user').get_or_create(
        user=user,
        defaults={'has_tier_access': is_auto_grant_email(user.email)},
    )
    if created:
        logger.info(
            'Created claims record for %s: uid=%s, tier_access=%s',
            user.email or user.get_username(),
            account.uid,
            account.has_tier_access,
        )
    return account


def get_account(uid: str) -> Account:
    """Get account by its opaque identifier.

    Args:
        uid: Account id.

    Returns:
        Account instance.

    Raises:
        InvalidArgumentError: If uid is empty.
        NotFoundError: If no account has this id.
    """
    if not uid:
        raise InvalidArgumentError('UID is required.')
    try:
        return Account.objects.select_related('user').get(uid=uid)
    except Account.DoesNotExist:
        raise NotFoundError(f'No account with uid {uid}.') from None


def get_account_by_email(email: str) -> Account:
    """Look up an account by email (case-insensitive).

    Args:
        email: Account email.

    Returns:
        Account for the auth user with this email.

    Raises:
        InvalidArgumentError: If email is empty.
        NotFoundError: If no auth user has this email.
    """
    if not email:
        raise InvalidArgumentError('The "email" parameter is required.')
    user = User.objects.filter(email__iexact=email).order_by('pk').first()
    if user is None:
        raise NotFoundError(f'No account with email {email}.')
    return ensure_account(user)


def update_claims(
    account: Account,
    *,
    is_admin: bool | None = None,
    has_tier_access: bool | None = None,
) -> Account:
    """Merge new claim values into the claims record.

    Only the given flags are written, other fields are left untouched.

    Args:
        account: Account to update.
        is_admin: New administrator flag, None keeps the current value.
        has_tier_access: New tier access flag, None keeps the current value.

    Returns:
        Updated Account instance.
    """
    update_fields = ['updated_at']
    if is_admin is not None:
        account.is_admin = is_admin
        update_fields.append('is_admin')
    if has_tier_access is not None:
        account.has_tier_access = has_tier_access
        update_fields.append('has_tier_access')

    with transaction.atomic():
        account.save(update_fields=update_fields)

    logger.info(
        'Claims updated for %s: %s',
        account.uid,
        account.get_claims(),
    )
    return account


def administrator_exists() -> bool:
    """Check if any account holds the administrator claim.

    Returns:
        True if at least one administrator exists.
    """
    return Account.objects.filter(is_admin=True).exists()
