"""Django storage configuration for the physical matter tree.

Every user's files live under ``MATTER_STORAGE_ROOT/<username>/root``.
The backend must support atomic renames, so it is a local filesystem
storage rather than an object store.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.matters.infrastructure.storage.MatterStorage',
        'OPTIONS': {
            'location': config(
                'MATTER_STORAGE_ROOT',
                default=str(BASE_DIR.joinpath('matter')),
            ),
            'file_permissions_mode': 0o644,
            'directory_permissions_mode': 0o755,
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
