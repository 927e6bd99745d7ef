"""Business logic for access grants.

Claims written here only reach session tokens issued afterwards: callers
must refresh their token before relying on the new claims.
"""

import logging

from django.conf import settings

from server.apps.accounts.logic.authorization import (
    AuthContext,
    require_authenticated,
)
from server.apps.accounts.logic.claims_operations import (
    administrator_exists,
    get_account,
    get_account_by_email,
    update_claims,
)
from server.apps.accounts.models import Account
from server.common.errors import InvalidArgumentError, PermissionDeniedError

logger = logging.getLogger(__name__)


def grant_tier_access(context: AuthContext | None) -> Account:
    """Grant cold tier access to the caller's own account.

    Idempotent. Only authentication is required, not prior tier access.

    Args:
        context: Caller context.

    Returns:
        Updated Account instance.
    """
    context = require_authenticated(context)
    account = get_account(context.account_id)
    account = update_claims(account, has_tier_access=True)
    logger.info('Tier access granted for account %s', account.uid)
    return account


def _is_bootstrap_identity(email: str) -> bool:
    allowed = {
        allowed_email.strip().lower()
        for allowed_email in settings.ACCOUNTS_BOOTSTRAP_ADMIN_EMAILS
    }
    return bool(email) and email.lower() in allowed


def can_bootstrap_admin(context: AuthContext, target_email: str) -> bool:
    """Check if the caller may provision the first administrator.

    Applies only while no administrator exists, only to an identity in
    ``ACCOUNTS_BOOTSTRAP_ADMIN_EMAILS``, and only to the caller itself.

    Args:
        context: Caller context.
        target_email: Email of the account to elevate.

    Returns:
        True if the bootstrap path applies.
    """
    if not _is_bootstrap_identity(context.email):
        return False
    if target_email.lower() != context.email.lower():
        return False
    return not administrator_exists()


def set_admin_claims(
    context: AuthContext | None,
    email: str,
    is_admin: bool,
) -> Account:
    """Set the administrator claim on the account with this email.

    Always grants tier access as well. Requires the admin claim on the
    caller, except for first-admin bootstrap (see
    :func:`can_bootstrap_admin`).

    Args:
        context: Caller context.
        email: Target account email.
        is_admin: New administrator flag.

    Returns:
        Updated Account instance.

    Raises:
        InvalidArgumentError: If ``is_admin`` is not a bool or email is
            missing.
        PermissionDeniedError: If the caller may not elevate accounts.
    """
    context = require_authenticated(context)

    if not isinstance(is_admin, bool):
        raise InvalidArgumentError('The "isAdmin" field must be a boolean.')
    if not email or not isinstance(email, str):
        raise InvalidArgumentError('The "email" parameter is required.')

    if not context.is_admin:
        if not can_bootstrap_admin(context, email):
            logger.warning(
                'Admin elevation denied for %s -> %s',
                context.account_id,
                email,
            )
            raise PermissionDeniedError(
                'You must be an admin to perform this action.',
            )
        logger.warning('Bootstrapping first administrator: %s', email)

    account = get_account_by_email(email)
    account = update_claims(account, is_admin=is_admin, has_tier_access=True)
    logger.info('Admin claim set for %s: %s', email, is_admin)
    return account
