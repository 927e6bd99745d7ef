"""Tests for the claims store."""

import pytest
from django.contrib.auth import get_user_model

from server.apps.accounts.logic.claims_operations import (
    administrator_exists,
    ensure_account,
    get_account,
    get_account_by_email,
    is_auto_grant_email,
    update_claims,
)
from server.apps.accounts.models import Account
from server.common.errors import InvalidArgumentError, NotFoundError

User = get_user_model()


@pytest.mark.django_db
class TestAccountProvisioning:
    """Tests for claims records created with auth users."""

    def test_new_user_gets_account_without_claims(self, user):
        """Test the signal creates an account with no claims."""
        account = Account.objects.get(user=user)

        assert account.uid
        assert account.get_claims() == {'admin': False, 'gcpAccess': False}
        assert not account.disabled

    def test_uids_are_unique(self, user, other_user):
        """Test accounts get distinct opaque ids."""
        assert user.account.uid != other_user.account.uid

    def test_auto_grant_domain(self, settings):
        """Test accounts in auto-grant domains get tier access on creation."""
        settings.ACCOUNTS_AUTO_GRANT_DOMAINS = ['Example.org']

        granted = User.objects.create_user('a', 'a@example.org', 'pass12345')
        plain = User.objects.create_user('b', 'b@example.com', 'pass12345')

        assert Account.objects.get(user=granted).has_tier_access
        assert not Account.objects.get(user=plain).has_tier_access

    def test_ensure_account_is_idempotent(self, account):
        """Test ensure_account returns the existing record."""
        assert ensure_account(account.user).uid == account.uid
        assert Account.objects.count() == 1


class TestAutoGrantEmail:
    """Tests for auto-grant domain matching."""

    def test_matching(self, settings):
        """Test domain match is case-insensitive and tolerates a leading @."""
        settings.ACCOUNTS_AUTO_GRANT_DOMAINS = ['@corp.example']

        assert is_auto_grant_email('someone@CORP.example')
        assert not is_auto_grant_email('someone@example.com')
        assert not is_auto_grant_email('not-an-email')
        assert not is_auto_grant_email('')


@pytest.mark.django_db
class TestLookups:
    """Tests for account lookups."""

    def test_get_account(self, account):
        """Test lookup by uid."""
        assert get_account(account.uid) == account

    def test_get_account_missing(self, db):
        """Test unknown or empty uid."""
        with pytest.raises(NotFoundError):
            get_account('does-not-exist')
        with pytest.raises(InvalidArgumentError):
            get_account('')

    def test_get_account_by_email(self, account):
        """Test case-insensitive lookup by email."""
        assert get_account_by_email('Test@Example.com').uid == account.uid

    def test_get_account_by_email_missing(self, db):
        """Test unknown email."""
        with pytest.raises(NotFoundError):
            get_account_by_email('nobody@example.com')


@pytest.mark.django_db
class TestUpdateClaims:
    """Tests for claim merges."""

    def test_merge_keeps_other_flags(self, account):
        """Test writing one flag leaves the other untouched."""
        update_claims(account, has_tier_access=True)
        update_claims(account, is_admin=True)

        account.refresh_from_db()
        assert account.has_tier_access
        assert account.is_admin

    def test_administrator_exists(self, account):
        """Test admin detection."""
        assert not administrator_exists()

        update_claims(account, is_admin=True)

        assert administrator_exists()
