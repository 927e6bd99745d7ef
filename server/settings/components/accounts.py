"""Identity, claims and session token settings."""

from decouple import Csv

from server.settings.components import config

# Session token lifetime in seconds
ACCOUNTS_TOKEN_MAX_AGE = config('ACCOUNTS_TOKEN_MAX_AGE', cast=int, default=3600)

# Identities allowed to provision themselves as the first administrator
ACCOUNTS_BOOTSTRAP_ADMIN_EMAILS = config(
    'ACCOUNTS_BOOTSTRAP_ADMIN_EMAILS',
    cast=Csv(),
    default='',
)

# New accounts with an email in these domains get tier access right away
ACCOUNTS_AUTO_GRANT_DOMAINS = config(
    'ACCOUNTS_AUTO_GRANT_DOMAINS',
    cast=Csv(),
    default='',
)

ACCOUNTS_RESET_PASSWORD_LENGTH = config(
    'ACCOUNTS_RESET_PASSWORD_LENGTH',
    cast=int,
    default=12,
)

ACCOUNTS_LIST_PAGE_SIZE = config('ACCOUNTS_LIST_PAGE_SIZE', cast=int, default=1000)
