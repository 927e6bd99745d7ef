"""Authorization gate and session tokens.

Session tokens are signed, timestamped payloads carrying the account id
and a snapshot of its claims. Verifying a token yields an
:class:`AuthContext` that is passed explicitly into every operation.
Claims inside a token do not change when the claims store changes: after
a claims mutation the caller has to obtain a fresh token.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.core import signing

from server.apps.accounts.logic.claims_operations import ensure_account
from server.apps.accounts.models import ADMIN_CLAIM, TIER_ACCESS_CLAIM, Account
from server.common.errors import (
    InvalidArgumentError,
    PermissionDeniedError,
    UnauthenticatedError,
)

User = get_user_model()
logger = logging.getLogger(__name__)

_TOKEN_SALT: Final = 'server.apps.accounts.session-token'


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Verified caller identity with its claim snapshot."""

    account_id: str
    email: str
    claims: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        """Whether the token carries the administrator claim."""
        return self.claims.get(ADMIN_CLAIM) is True

    @property
    def has_tier_access(self) -> bool:
        """Whether the token carries the tier access claim."""
        return self.claims.get(TIER_ACCESS_CLAIM) is True


def issue_token(account: Account) -> str:
    """Issue a session token with the account's current claims.

    Args:
        account: Account to issue the token for.

    Returns:
        Signed token string.
    """
    payload = {
        'uid': account.uid,
        'email': account.email,
        'claims': account.get_claims(),
    }
    logger.debug('Issuing session token for account %s', account.uid)
    return signing.dumps(payload, salt=_TOKEN_SALT, compress=True)


def sign_in(email: str, password: str) -> Account:
    """Check credentials and return the matching account.

    Args:
        email: Account email.
        password: Account password.

    Returns:
        Authenticated account.

    Raises:
        InvalidArgumentError: If email or password is missing.
        UnauthenticatedError: If credentials are wrong or the account
            is disabled.
    """
    if not email or not password:
        raise InvalidArgumentError('Email and password are required.')

    try:
        user = User.objects.get(email__iexact=email)
    except (User.DoesNotExist, User.MultipleObjectsReturned):
        logger.warning('Sign-in failed, unknown email: %s', email)
        raise UnauthenticatedError('Invalid credentials.') from None

    authenticated = authenticate(
        username=user.get_username(),
        password=password,
    )
    if authenticated is None:
        # ModelBackend also returns None for inactive users
        logger.warning('Sign-in failed for %s', email)
        raise UnauthenticatedError('Invalid credentials.')

    logger.info('Account signed in: %s', email)
    return ensure_account(authenticated)


def verify_token(token: str | None) -> AuthContext:
    """Verify a session token and build the caller context.

    The token must be correctly signed and younger than
    ``ACCOUNTS_TOKEN_MAX_AGE``, and its account must still exist and be
    enabled.

    Args:
        token: Bearer token from the request.

    Returns:
        AuthContext for the caller.

    Raises:
        UnauthenticatedError: If the token is missing, invalid, expired or
            belongs to a deleted or disabled account.
    """
    if not token:
        raise UnauthenticatedError('User not authenticated.')

    try:
        payload = signing.loads(
            token,
            salt=_TOKEN_SALT,
            max_age=settings.ACCOUNTS_TOKEN_MAX_AGE,
        )
    except signing.SignatureExpired:
        logger.info('Rejected expired session token')
        raise UnauthenticatedError('Session token expired.') from None
    except signing.BadSignature:
        logger.warning('Rejected session token with bad signature')
        raise UnauthenticatedError('Invalid session token.') from None

    account_id = payload.get('uid')
    account = (
        Account.objects.select_related('user')
        .filter(uid=account_id)
        .first()
    )
    if account is None or account.disabled:
        logger.warning('Rejected token of missing or disabled account %s', account_id)
        raise UnauthenticatedError('User not authenticated.')

    return AuthContext(
        account_id=account.uid,
        email=account.email,
        claims=dict(payload.get('claims') or {}),
    )


def require_authenticated(context: AuthContext | None) -> AuthContext:
    """Ensure the caller is authenticated.

    Args:
        context: Caller context or None for anonymous calls.

    Returns:
        The same context, narrowed to non-None.

    Raises:
        UnauthenticatedError: If there is no caller context.
    """
    if context is None:
        raise UnauthenticatedError('User not authenticated.')
    return context


def require_admin(context: AuthContext | None) -> AuthContext:
    """Ensure the caller carries the administrator claim.

    Raises:
        UnauthenticatedError: If there is no caller context.
        PermissionDeniedError: If the admin claim is absent.
    """
    context = require_authenticated(context)
    if not context.is_admin:
        logger.warning('Admin claim required, denied for %s', context.account_id)
        raise PermissionDeniedError(
            'You must be an admin to perform this action.',
        )
    return context


def require_tier_access(context: AuthContext | None) -> AuthContext:
    """Ensure the caller carries the tier access claim.

    Raises:
        UnauthenticatedError: If there is no caller context.
        PermissionDeniedError: If the tier access claim is absent.
    """
    context = require_authenticated(context)
    if not context.has_tier_access:
        logger.warning('Tier access required, denied for %s', context.account_id)
        raise PermissionDeniedError(
            'Cold storage access has not been granted to this account.',
        )
    return context


def require_owner(context: AuthContext | None, account_id: str) -> AuthContext:
    """Ensure the caller owns the given storage namespace.

    Raises:
        UnauthenticatedError: If there is no caller context.
        PermissionDeniedError: If ``account_id`` is not the caller's.
    """
    context = require_authenticated(context)
    if account_id != context.account_id:
        logger.warning(
            'Cross-account access denied: %s -> %s',
            context.account_id,
            account_id,
        )
        raise PermissionDeniedError('You can only access your own files.')
    return context
