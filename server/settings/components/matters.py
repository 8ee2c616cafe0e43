"""Matter tree settings."""

from server.settings.components import config

# Upload size limit for users without an explicit quota row (negative = unlimited)
MATTER_DEFAULT_SIZE_LIMIT = config(
    'MATTER_DEFAULT_SIZE_LIMIT',
    cast=int,
    default=-1,
)

# Seconds to wait for a remote server when crawling a url
MATTER_CRAWL_TIMEOUT = config('MATTER_CRAWL_TIMEOUT', cast=int, default=30)
