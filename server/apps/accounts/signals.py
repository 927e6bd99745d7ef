"""Signal handlers for accounts app."""

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from server.apps.accounts.logic.claims_operations import ensure_account


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def provision_account(
    sender: type,
    instance: object,
    created: bool,
    **kwargs: object,
) -> None:
    """Create the claims record when an auth user is created.

    Args:
        sender: The user model class.
        instance: The saved user.
        created: Whether the row was just inserted.
        **kwargs: Additional signal arguments.
    """
    if not created or kwargs.get('raw'):
        return

    ensure_account(instance)
