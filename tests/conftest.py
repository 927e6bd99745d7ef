"""Shared fixtures for all app tests."""

from collections.abc import Callable

import boto3
import pytest
from django.contrib.auth import get_user_model
from moto import mock_aws

from server.apps.accounts.logic.authorization import AuthContext
from server.apps.accounts.models import Account
from server.apps.tiering.infrastructure.adapters import (
    ColdStorageAdapter,
    HotStorageAdapter,
    build_cold_adapter,
    build_hot_adapter,
)

User = get_user_model()

HOT_BUCKET = 'hot-tier'
COLD_BUCKET = 'cold-archive'


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    # A token without matching keys breaks request signing
    monkeypatch.delenv('AWS_SECURITY_TOKEN', raising=False)
    monkeypatch.delenv('AWS_SESSION_TOKEN', raising=False)
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    """Use a cheap hasher, password strength is irrelevant in tests."""
    settings.PASSWORD_HASHERS = [
        'django.contrib.auth.hashers.MD5PasswordHasher',
    ]


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def account(user) -> Account:
    """Claims record of the test user, without any claim."""
    return Account.objects.select_related('user').get(user=user)


@pytest.fixture
def other_account(other_user) -> Account:
    """Claims record of the second test user."""
    return Account.objects.select_related('user').get(user=other_user)


@pytest.fixture
def tier_account(account) -> Account:
    """Test user's account with cold tier access."""
    account.has_tier_access = True
    account.save(update_fields=['has_tier_access'])
    return account


@pytest.fixture
def admin_account(db) -> Account:
    """Administrator account.

    Returns:
        Account holding the admin and tier access claims.
    """
    admin_user = User.objects.create_user(
        username='adminuser',
        password='adminpass123',
        email='admin@example.com',
    )
    admin = Account.objects.select_related('user').get(user=admin_user)
    admin.is_admin = True
    admin.has_tier_access = True
    admin.save(update_fields=['is_admin', 'has_tier_access'])
    return admin


@pytest.fixture
def context_for() -> Callable[[Account], AuthContext]:
    """Factory building a caller context from an account's current claims.

    Returns:
        Function mapping an Account to an AuthContext.
    """

    def factory(target: Account) -> AuthContext:
        return AuthContext(
            account_id=target.uid,
            email=target.email,
            claims=target.get_claims(),
        )

    return factory


@pytest.fixture
def context(account, context_for) -> AuthContext:
    """Caller context of a plain account."""
    return context_for(account)


@pytest.fixture
def tier_context(tier_account, context_for) -> AuthContext:
    """Caller context carrying the tier access claim."""
    return context_for(tier_account)


@pytest.fixture
def admin_context(admin_account, context_for) -> AuthContext:
    """Caller context carrying the admin claim."""
    return context_for(admin_account)


@pytest.fixture
def mock_s3():
    """Mock S3 service with the hot and cold buckets.

    Yields:
        boto3 S3 resource with both tier buckets created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')

        conn.create_bucket(Bucket=HOT_BUCKET)
        conn.create_bucket(Bucket=COLD_BUCKET)

        yield conn


@pytest.fixture
def hot(mock_s3) -> HotStorageAdapter:
    """Hot tier adapter over the mocked bucket."""
    return build_hot_adapter()


@pytest.fixture
def cold(mock_s3) -> ColdStorageAdapter:
    """Cold tier adapter over the mocked bucket."""
    return build_cold_adapter()


@pytest.fixture
def put_object(mock_s3) -> Callable[..., None]:
    """Factory writing an object straight into a mocked bucket.

    Returns:
        Function taking bucket, key, body and an optional content type.
    """

    def factory(
        bucket: str,
        key: str,
        body: bytes,
        content_type: str = 'text/plain',
    ) -> None:
        mock_s3.Object(bucket, key).put(Body=body, ContentType=content_type)

    return factory


@pytest.fixture
def read_object(mock_s3) -> Callable[[str, str], bytes]:
    """Factory reading the body of an object from a mocked bucket.

    Returns:
        Function taking bucket and key.
    """

    def factory(bucket: str, key: str) -> bytes:
        return mock_s3.Object(bucket, key).get()['Body'].read()

    return factory


@pytest.fixture
def object_exists(mock_s3) -> Callable[[str, str], bool]:
    """Factory checking whether a key exists in a mocked bucket.

    Returns:
        Function taking bucket and key.
    """

    def factory(bucket: str, key: str) -> bool:
        listed = mock_s3.Bucket(bucket).objects.filter(Prefix=key)
        return any(summary.key == key for summary in listed)

    return factory
