"""Settings entry point.

Settings are split into components with django-split-settings.
Values come from the environment or ``config/.env`` via python-decouple.
"""

import django_stubs_ext
from split_settings.tools import include

# Runtime support for generic admin/queryset annotations
django_stubs_ext.monkeypatch()

include(
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/accounts.py',
    'components/tiering.py',
)
