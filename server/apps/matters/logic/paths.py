"""Path resolution between matters and the physical storage.

Matter paths are user-visible paths like /photos/cat.jpg.
Storage names prefix them with the owner's root: alice/root/photos/cat.jpg.
"""

import os
from typing import TYPE_CHECKING, Final

from django.core.files.storage import default_storage

from server.apps.matters.models import MATTER_ROOT, Matter

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

    from server.apps.matters.infrastructure.storage import MatterStorage

_PATH_SEPARATOR: Final = '/'

# Directory under the user's folder that holds the matter tree
_USER_ROOT_DIRECTORY: Final = 'root'


def get_storage() -> 'MatterStorage':
    """Get the configured default storage backend.

    Returns:
        MatterStorage instance.
    """
    return default_storage  # type: ignore[return-value]


def join_path(parent_path: str, name: str) -> str:
    """Build the path of a child matter.

    Example: ('/photos', 'cat.jpg') -> '/photos/cat.jpg'
    """
    return f'{parent_path}{_PATH_SEPARATOR}{name}'


def parent_path_of(path: str) -> str:
    """Path of the directory containing ``path``.

    Example: '/photos/cat.jpg' -> '/photos', '/cat.jpg' -> ''
    """
    return path.rsplit(_PATH_SEPARATOR, 1)[0]


def path_depth(path: str) -> int:
    """Number of directory levels in a path ('' is the root, depth 0)."""
    return len([segment for segment in path.split(_PATH_SEPARATOR) if segment])


def storage_name(username: str, path: str) -> str:
    """Convert a matter path to a storage name.

    Args:
        username: Owner of the matter.
        path: Matter path from the user root ('' for the root itself).

    Returns:
        Storage name (e.g., alice/root/photos/cat.jpg).
    """
    return f'{username}{_PATH_SEPARATOR}{_USER_ROOT_DIRECTORY}{path}'


def matter_storage_name(matter: Matter) -> str:
    """Storage name of an existing matter."""
    return storage_name(matter.username, matter.path)


def user_storage_root(username: str) -> str:
    """Absolute directory holding a user's tree, created lazily.

    Args:
        username: Owner of the tree.

    Returns:
        Absolute filesystem path.
    """
    return get_storage().makedirs(storage_name(username, ''))


def absolute_path(matter: Matter) -> str:
    """Absolute filesystem path of a matter.

    Always ``user_storage_root(owner) + matter.path``.
    """
    return user_storage_root(matter.username) + matter.path.replace(
        _PATH_SEPARATOR,
        os.sep,
    )


def root_matter(user: 'AbstractBaseUser') -> Matter:
    """Synthesize the root directory of a user.

    The root is never stored: its identifier and parent are both
    ``MATTER_ROOT`` and its path is empty.

    Args:
        user: Owner of the tree.

    Returns:
        Unsaved Matter instance.
    """
    return Matter(
        uuid=MATTER_ROOT,
        parent_uuid=MATTER_ROOT,
        user=user,
        username=user.get_username(),
        is_dir=True,
        name=MATTER_ROOT,
        path='',
    )
