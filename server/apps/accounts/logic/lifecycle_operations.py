"""Business logic for account lifecycle management.

Every operation here requires the administrator claim. Deleting an
account removes the identity record only: the account's objects in the
hot and cold tiers are retained.
"""

import enum
import logging
import secrets
import string
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Final, assert_never

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from server.apps.accounts.logic.authorization import AuthContext, require_admin
from server.apps.accounts.logic.claims_operations import ensure_account, get_account
from server.apps.accounts.models import Account
from server.common.errors import InvalidArgumentError

User = get_user_model()
logger = logging.getLogger(__name__)

_MIN_PASSWORD_LENGTH: Final = 8
_PASSWORD_ALPHABET: Final = string.ascii_letters + string.digits + '!#$%&*+-=?@^_'


class AdminAction(enum.StrEnum):
    """Account actions available to administrators."""

    RESET_PASSWORD = 'resetPassword'
    DISABLE = 'disableAccount'
    ENABLE = 'enableAccount'
    DELETE = 'deleteAccount'


@dataclass(frozen=True, slots=True)
class AccountSummary:
    """Public view of an account for administrators."""

    uid: str
    email: str | None
    display_name: str | None
    disabled: bool

    def as_dict(self) -> dict[str, Any]:
        """Serialize with wire field names."""
        return {
            'uid': self.uid,
            'email': self.email,
            'displayName': self.display_name,
            'disabled': self.disabled,
        }


@dataclass(frozen=True, slots=True)
class AccountPage:
    """One page of accounts plus the continuation token."""

    accounts: list[AccountSummary]
    next_page_token: str | None


@dataclass(frozen=True, slots=True)
class AdminActionResult:
    """Outcome of an administrator action."""

    message: str
    password: str | None = None


def _summarize(user: Any) -> AccountSummary:
    try:
        account = user.account
    except Account.DoesNotExist:
        account = ensure_account(user)
    return AccountSummary(
        uid=account.uid,
        email=user.email or None,
        display_name=user.get_full_name() or None,
        disabled=not user.is_active,
    )


def list_accounts_page(
    page_size: int | None = None,
    page_token: str | None = None,
) -> AccountPage:
    """Fetch one page of accounts in primary key order.

    Args:
        page_size: Maximum accounts per page, ``ACCOUNTS_LIST_PAGE_SIZE``
            by default.
        page_token: Continuation token from the previous page.

    Returns:
        AccountPage; ``next_page_token`` is None on the last page.

    Raises:
        InvalidArgumentError: If the page token is malformed.
    """
    size = page_size or settings.ACCOUNTS_LIST_PAGE_SIZE
    queryset = User.objects.select_related('account').order_by('pk')

    if page_token:
        try:
            last_pk = int(page_token)
        except ValueError:
            raise InvalidArgumentError('Malformed page token.') from None
        queryset = queryset.filter(pk__gt=last_pk)

    # Fetch one extra row to know if another page exists
    users = list(queryset[:size + 1])
    has_more = len(users) > size
    users = users[:size]

    next_token = str(users[-1].pk) if has_more else None
    return AccountPage(
        accounts=[_summarize(user) for user in users],
        next_page_token=next_token,
    )


def iterate_accounts(page_size: int | None = None) -> Iterator[AccountSummary]:
    """Iterate over every account, following continuation tokens.

    Args:
        page_size: Accounts fetched per page.

    Yields:
        AccountSummary for each account.
    """
    page_token: str | None = None
    while True:
        page = list_accounts_page(page_size, page_token)
        yield from page.accounts
        page_token = page.next_page_token
        if page_token is None:
            break


def list_accounts(
    context: AuthContext | None,
    page_size: int | None = None,
) -> list[AccountSummary]:
    """List all accounts.

    Args:
        context: Caller context, must carry the admin claim.
        page_size: Accounts fetched per page.

    Returns:
        Every account, ordering is not guaranteed stable across calls.
    """
    require_admin(context)
    accounts = list(iterate_accounts(page_size))
    logger.info('Listed %d accounts', len(accounts))
    return accounts


def generate_password(length: int | None = None) -> str:
    """Generate a random replacement password.

    Args:
        length: Password length, ``ACCOUNTS_RESET_PASSWORD_LENGTH`` by
            default, never shorter than 8.

    Returns:
        Random password from letters, digits and punctuation.
    """
    size = max(_MIN_PASSWORD_LENGTH, length or settings.ACCOUNTS_RESET_PASSWORD_LENGTH)
    return ''.join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(size))


def reset_password(context: AuthContext | None, uid: str) -> str:
    """Replace the account password with a random one.

    The password is returned once and never stored in clear text.

    Args:
        context: Caller context, must carry the admin claim.
        uid: Target account id.

    Returns:
        New password.
    """
    require_admin(context)
    account = get_account(uid)
    password = generate_password()

    user = account.user
    user.set_password(password)
    user.save(update_fields=['password'])

    logger.info('Password reset for account %s', uid)
    return password


def _set_disabled(uid: str, *, disabled: bool) -> Account:
    account = get_account(uid)
    user = account.user
    user.is_active = not disabled
    user.save(update_fields=['is_active'])
    logger.info('Account %s disabled=%s', uid, disabled)
    return account


def disable_account(context: AuthContext | None, uid: str) -> Account:
    """Disable an account (idempotent, keeps all data).

    Args:
        context: Caller context, must carry the admin claim.
        uid: Target account id.

    Returns:
        Updated Account instance.
    """
    require_admin(context)
    return _set_disabled(uid, disabled=True)


def enable_account(context: AuthContext | None, uid: str) -> Account:
    """Enable a previously disabled account (idempotent).

    Args:
        context: Caller context, must carry the admin claim.
        uid: Target account id.

    Returns:
        Updated Account instance.
    """
    require_admin(context)
    return _set_disabled(uid, disabled=False)


def delete_account(context: AuthContext | None, uid: str) -> None:
    """Delete an account's identity record. Irreversible.

    Stored objects under the account prefix are not deleted.

    Args:
        context: Caller context, must carry the admin claim.
        uid: Target account id.
    """
    require_admin(context)
    account = get_account(uid)

    with transaction.atomic():
        # Cascades to the claims record
        account.user.delete()

    logger.warning('Account deleted: %s (objects retained)', uid)


def perform_admin_action(
    context: AuthContext | None,
    action: AdminAction,
    uid: str,
) -> AdminActionResult:
    """Run one administrator action against an account.

    Args:
        context: Caller context, must carry the admin claim.
        action: Action to perform.
        uid: Target account id.

    Returns:
        AdminActionResult with a message (and password for resets).

    Raises:
        InvalidArgumentError: If uid is missing.
    """
    require_admin(context)
    if not uid:
        raise InvalidArgumentError('UID is required.')

    match action:
        case AdminAction.RESET_PASSWORD:
            password = reset_password(context, uid)
            return AdminActionResult(
                message=f'Password reset successfully: {password}',
                password=password,
            )
        case AdminAction.DISABLE:
            disable_account(context, uid)
            return AdminActionResult('User account disabled successfully.')
        case AdminAction.ENABLE:
            enable_account(context, uid)
            return AdminActionResult('User account enabled successfully.')
        case AdminAction.DELETE:
            delete_account(context, uid)
            return AdminActionResult('User account deleted successfully.')
        case _:
            assert_never(action)
