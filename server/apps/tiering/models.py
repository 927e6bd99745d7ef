"""Database models for tiering app."""

from typing import Final, final, override

from django.db import models

_ACCOUNT_ID_MAX_LENGTH: Final = 64
_FILE_NAME_MAX_LENGTH: Final = 512
_URL_MAX_LENGTH: Final = 2048


class Tier(models.TextChoices):
    """Storage tier a file can reside in."""

    HOT = 'hot', 'Hot'
    COLD = 'cold', 'Cold'


@final
class ColdFileRecord(models.Model):
    """Metadata index entry for a file residing in the cold tier.

    Keyed by ``(account_id, file_name)`` and mirroring the cold object
    at ``{account_id}/{file_name}``. The index is advisory: listings read
    the cold bucket directly, and the index can be rebuilt from it.

    ``account_id`` is a plain string rather than a foreign key, so
    entries outlive account deletion together with the objects they
    describe.
    """

    account_id = models.CharField(
        max_length=_ACCOUNT_ID_MAX_LENGTH,
        db_index=True,
        help_text='Owner account id (key prefix)',
    )

    file_name = models.CharField(
        max_length=_FILE_NAME_MAX_LENGTH,
    )

    url = models.CharField(
        max_length=_URL_MAX_LENGTH,
        help_text='Location of the object in the cold bucket',
    )

    archived_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Cold file record'  # type: ignore[mutable-override]
        verbose_name_plural = 'Cold file records'  # type: ignore[mutable-override]
        ordering = ['account_id', 'file_name']

        constraints = [
            models.UniqueConstraint(
                fields=['account_id', 'file_name'],
                name='cold_records_account_file_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.account_id}/{self.file_name}'
