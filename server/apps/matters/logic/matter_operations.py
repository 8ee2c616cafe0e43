"""Business logic for matter tree operations.

Every operation keeps two stores in step: the physical tree in
``MatterStorage`` and the ``Matter`` rows. There is no transaction
spanning both; a failure between a physical step and the row update
leaves them divergent and is reported, not repaired.

Functions prefixed with ``atomic_`` hold the owner's matter lock for
their whole duration and must never call each other (the lock is not
reentrant). The other functions expect the caller to hold the lock.
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, BinaryIO

import requests
from django.db import transaction
from django.db.models import QuerySet

from server.apps.matters.exceptions import (
    MatterConflictError,
    MatterIOError,
    MatterValidationError,
    QuotaExceededError,
)
from server.apps.matters.infrastructure.fetch import open_remote_stream
from server.apps.matters.infrastructure.formatting import human_file_size
from server.apps.matters.infrastructure.metadata import (
    normalize_matter_name,
    split_directory_path,
    validate_crawl_url,
    validate_filename,
)
from server.apps.matters.logic.detail import (
    is_same_or_descendant,
    lineage_uuids,
)
from server.apps.matters.logic.image_cache_operations import delete_by_matter
from server.apps.matters.logic.locks import matter_lock
from server.apps.matters.logic.paths import (
    get_storage,
    join_path,
    matter_storage_name,
    parent_path_of,
    path_depth,
    root_matter,
    storage_name,
)
from server.apps.matters.logic.quota_operations import check_upload_size
from server.apps.matters.models import MATTER_NAME_MAX_DEPTH, Matter

if TYPE_CHECKING:
    from server.apps.matters.infrastructure.storage import MatterStorage

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def _require_user(user: _User | None) -> _User:
    if user is None:
        raise MatterValidationError('User is required')
    return user


def _require_matter(matter: Matter | None, role: str) -> Matter:
    if matter is None:
        raise MatterValidationError(f'{role} is required')
    return matter


def _require_directory(directory: Matter | None, role: str) -> Matter:
    directory = _require_matter(directory, role)
    if not directory.is_dir:
        raise MatterValidationError(f'{role} must be a directory')
    return directory


def _require_not_root(matter: Matter, action: str) -> None:
    if matter.is_root:
        raise MatterValidationError(f'The root directory can not be {action}')


def _require_same_owner(matter: Matter, user_id: int) -> None:
    if matter.user_id != user_id:
        raise MatterValidationError(
            f'{matter.path or "/"} belongs to another user',
        )


def _ensure_vacant(storage: 'MatterStorage', name: str) -> None:
    """Refuse to place content over an unknown physical entry."""
    if storage.exists(name):
        raise MatterConflictError(f'{name} already exists in storage')


def _check_upload_target(
    user: _User,
    dir_matter: Matter,
    filename: str,
) -> str:
    """Validate where a new file goes, before any content is read.

    Returns:
        Storage name of the new file.

    Raises:
        MatterValidationError: If an argument is missing or invalid.
        MatterConflictError: If a file or a directory already has the name.
    """
    dir_matter = _require_directory(dir_matter, 'Directory')
    _require_same_owner(dir_matter, user.pk)
    validate_filename(filename)

    siblings = Matter.objects.filter(
        user_id=user.pk,
        parent_uuid=dir_matter.uuid,
        name=filename,
    )
    if siblings.exists():
        raise MatterConflictError(
            f'{filename} already exists in {dir_matter.path or "/"}',
        )

    file_storage_name = storage_name(
        dir_matter.username,
        join_path(dir_matter.path, filename),
    )
    if get_storage().is_directory(file_storage_name):
        raise MatterConflictError(
            f'{filename} is a directory in storage, operation failed',
        )
    return file_storage_name


def _subtree_directory_depth(matter: Matter) -> int:
    """Directory levels a matter brings along: 0 for files, 1 + deepest."""
    if not matter.is_dir:
        return 0

    base = path_depth(matter.path)
    descendant_paths = Matter.objects.filter(
        user_id=matter.user_id,
        is_dir=True,
        path__startswith=f'{matter.path}/',
    ).values_list('path', flat=True)
    deepest = max(
        (path_depth(path) for path in descendant_paths),
        default=base,
    )
    return deepest - base + 1


def _require_depth_fits(src_matter: Matter, dest_dir_matter: Matter) -> None:
    levels = _subtree_directory_depth(src_matter)
    if path_depth(dest_dir_matter.path) + levels > MATTER_NAME_MAX_DEPTH:
        raise MatterValidationError(
            f'Placing {src_matter.path} in {dest_dir_matter.path or "/"} '
            f'would nest directories deeper than {MATTER_NAME_MAX_DEPTH} '
            'levels',
        )


def list_directory(directory: Matter) -> QuerySet[Matter]:
    """List direct children of a directory.

    Args:
        directory: Directory matter (the synthesized root included).

    Returns:
        QuerySet of child matters, directories first.
    """
    return Matter.objects.children_of(directory)


def upload(  # noqa: WPS211
    stream: BinaryIO,
    user: _User,
    dir_matter: Matter,
    filename: str,
    privacy: bool = True,
) -> Matter:
    """Store a stream as a new file in a directory.

    The stream is written completely before the user's upload limit is
    checked against the observed byte count; an oversized file is
    removed again before the error is raised.

    Args:
        stream: Readable binary stream with the file content.
        user: Owner of the new file.
        dir_matter: Directory receiving the file.
        filename: Name of the new file.
        privacy: Visibility flag of the new file.

    Returns:
        Created file Matter.

    Raises:
        MatterValidationError: If an argument is missing or invalid.
        MatterConflictError: If the directory already has a file or a
            sub-directory of that name.
        QuotaExceededError: If the file is larger than the user's limit.
        MatterIOError: If the file can not be written.
    """
    user = _require_user(user)
    file_storage_name = _check_upload_target(user, dir_matter, filename)

    storage = get_storage()
    file_path = join_path(dir_matter.path, filename)

    # Step 1: Write content to storage
    try:
        storage.makedirs(matter_storage_name(dir_matter))
        file_size = storage.write_stream(file_storage_name, stream)
    except OSError as error:
        logger.exception('Failed to write upload: %s', file_storage_name)
        storage.rollback_upload(file_storage_name)
        raise MatterIOError(f'Failed to store {filename}') from error

    logger.info(
        'Uploaded file %s of size %s',
        file_path,
        human_file_size(file_size),
    )

    # Step 2: Check the observed size against the user's limit
    try:
        check_upload_size(user, file_size)
    except QuotaExceededError:
        storage.rollback_upload(file_storage_name)
        raise

    # Step 3: Create database record
    try:
        with transaction.atomic():
            matter = Matter.objects.create(
                parent_uuid=dir_matter.uuid,
                user=user,
                username=dir_matter.username,
                is_dir=False,
                name=filename,
                path=file_path,
                size=file_size,
                privacy=privacy,
                content_hash='',
            )
    except Exception:
        logger.exception(
            'Database insert failed, rolling back upload: %s',
            file_storage_name,
        )
        storage.rollback_upload(file_storage_name)
        raise

    logger.info('File record created: %s (ID: %s)', file_path, matter.uuid)
    return matter


def atomic_upload(  # noqa: WPS211
    stream: BinaryIO,
    user: _User,
    dir_matter: Matter,
    filename: str,
    privacy: bool = True,
    overwrite: bool = False,
) -> Matter:
    """Upload a file while holding the user's matter lock.

    Args:
        stream: Readable binary stream with the file content.
        user: Owner of the new file.
        dir_matter: Directory receiving the file.
        filename: Name of the new file.
        privacy: Visibility flag of the new file.
        overwrite: Replace a matter already stored under that name.

    Returns:
        Created file Matter.
    """
    user = _require_user(user)

    with matter_lock(user.pk):
        dir_matter = _require_directory(dir_matter, 'Directory')
        _require_same_owner(dir_matter, user.pk)
        validate_filename(filename)
        handle_overwrite(
            user.pk,
            join_path(dir_matter.path, filename),
            overwrite,
        )
        return upload(stream, user, dir_matter, filename, privacy)


def atomic_crawl(  # noqa: WPS211
    url: str,
    filename: str,
    user: _User,
    dir_matter: Matter,
    privacy: bool = True,
) -> Matter:
    """Fetch a remote resource and upload it as a new file.

    Args:
        url: http(s) url of the resource.
        filename: Name of the new file.
        user: Owner of the new file.
        dir_matter: Directory receiving the file.
        privacy: Visibility flag of the new file.

    Returns:
        Created file Matter.

    Raises:
        MatterValidationError: If the url or another argument is invalid.
        MatterConflictError: If the name is taken; nothing is fetched.
        MatterIOError: If the remote resource can not be fetched.
    """
    user = _require_user(user)

    with matter_lock(user.pk):
        validate_crawl_url(url)
        _check_upload_target(user, dir_matter, filename)

        try:
            with open_remote_stream(url) as stream:
                return upload(stream, user, dir_matter, filename, privacy)
        except requests.RequestException as error:
            logger.exception('Failed to fetch remote resource: %s', url)
            raise MatterIOError(f'Failed to fetch {url}') from error


def create_directory(dir_matter: Matter, name: str, user: _User) -> Matter:
    """Create a directory inside another one.

    Does not take the matter lock: callers needing atomicity use
    ``atomic_create_directory``.

    Args:
        dir_matter: Parent directory (the synthesized root included).
        name: Name of the new directory, surrounding whitespace ignored.
        user: Owner of the parent directory.

    Returns:
        Created directory Matter.

    Raises:
        MatterValidationError: If an argument is invalid or the new
            directory would be nested too deep.
        MatterConflictError: If the parent already has such a directory.
        MatterIOError: If the physical directory can not be created.
    """
    dir_matter = _require_directory(dir_matter, 'Parent')
    user = _require_user(user)
    _require_same_owner(dir_matter, user.pk)
    name = normalize_matter_name(name)

    siblings = Matter.objects.count_siblings(
        user.pk,
        dir_matter.uuid,
        True,  # noqa: WPS425
        name,
    )
    if siblings:
        raise MatterConflictError(
            f'{name} already exists, please use another name',
        )

    if path_depth(dir_matter.path) + 1 > MATTER_NAME_MAX_DEPTH:
        raise MatterValidationError(
            f'Directories can not be nested deeper than '
            f'{MATTER_NAME_MAX_DEPTH} levels',
        )

    relative_path = join_path(dir_matter.path, name)

    try:
        absolute_path = get_storage().makedirs(
            storage_name(dir_matter.username, relative_path),
        )
    except OSError as error:
        logger.exception('Failed to create directory: %s', relative_path)
        raise MatterIOError(f'Failed to create {relative_path}') from error

    logger.info('Created directory: %s', absolute_path)

    with transaction.atomic():
        matter = Matter.objects.create(
            parent_uuid=dir_matter.uuid,
            user=user,
            username=dir_matter.username,
            is_dir=True,
            name=name,
            path=relative_path,
        )
    return matter


def atomic_create_directory(
    dir_matter: Matter,
    name: str,
    user: _User,
) -> Matter:
    """Create a directory while holding the user's matter lock."""
    user = _require_user(user)
    with matter_lock(user.pk):
        return create_directory(dir_matter, name, user)


def create_directories(user: _User, dir_path: str) -> Matter:
    """Materialize every missing directory of a path.

    Existing directories along the path are reused, so calling this
    twice with the same path creates nothing the second time.

    Example: '/photos/2024' creates /photos and /photos/2024.

    Args:
        user: Owner of the tree.
        dir_path: Path starting at the user root, '/'-delimited.

    Returns:
        Deepest directory Matter; the synthesized root for '/'.

    Raises:
        MatterValidationError: If the path is invalid or too deep.
    """
    user = _require_user(user)
    segments = split_directory_path(dir_path)

    directory = root_matter(user)
    for segment in segments:
        name = normalize_matter_name(segment)
        existing = Matter.objects.find_child_directory(directory, name)
        if existing is None:
            directory = create_directory(directory, name, user)
        else:
            directory = existing
    return directory


def atomic_create_directories(user: _User, dir_path: str) -> Matter:
    """Create a directory path while holding the user's matter lock."""
    user = _require_user(user)
    with matter_lock(user.pk):
        return create_directories(user, dir_path)


def handle_overwrite(
    user_id: int,
    destination_path: str,
    overwrite: bool,
    protected: Matter | None = None,
) -> None:
    """Apply the overwrite policy to a destination path.

    The existing matter is deleted directly, without taking the lock.

    Args:
        user_id: Owner of the destination.
        destination_path: Path about to receive content.
        overwrite: Whether an existing matter may be replaced.
        protected: Matter being placed; it and its ancestors are never
            deleted to make room for it.

    Raises:
        MatterConflictError: If a matter exists there and may not be
            replaced.
    """
    existing = Matter.objects.find_by_path(user_id, destination_path)
    if existing is None:
        return

    if not overwrite:
        raise MatterConflictError(
            f'{destination_path} already exists, operation failed',
        )

    if protected is not None and is_same_or_descendant(protected, existing):
        raise MatterConflictError(
            f'{destination_path} can not be replaced by its own content',
        )

    logger.info('Overwriting existing matter: %s', destination_path)
    delete_matter(existing)


def adjust_descendant_paths(directory: Matter) -> int:
    """Re-stamp the stored path of every descendant of a directory.

    Walks the subtree with an explicit worklist. Files drop their image
    caches before the new path is saved.

    Args:
        directory: Directory whose path just changed (already saved).

    Returns:
        Number of descendants updated.
    """
    pending = [
        (child, directory.path)
        for child in Matter.objects.children_of(directory)
    ]
    updated = 0

    while pending:
        matter, parent_path = pending.pop()
        if not matter.is_dir:
            delete_by_matter(matter)

        matter.path = join_path(parent_path, matter.name)
        matter.save(update_fields=['path', 'updated_at'])
        updated += 1

        if matter.is_dir:
            pending.extend(
                (child, matter.path)
                for child in Matter.objects.children_of(matter)
            )

    logger.info(
        'Re-stamped %d descendants of %s',
        updated,
        directory.path,
    )
    return updated


def move(src_matter: Matter, dest_dir_matter: Matter) -> Matter:
    """Place a matter inside another directory.

    Ignores the overwrite policy and the lock. Directories are moved
    physically in one rename, then every descendant path is re-stamped.

    Args:
        src_matter: File or directory to move.
        dest_dir_matter: Destination directory.

    Returns:
        The moved Matter.

    Raises:
        MatterValidationError: If an argument is missing or invalid.
        MatterConflictError: If something already occupies the
            destination in storage.
        MatterIOError: If the physical rename fails.
    """
    src_matter = _require_matter(src_matter, 'Source')
    dest_dir_matter = _require_directory(dest_dir_matter, 'Destination')
    _require_not_root(src_matter, 'moved')

    if src_matter.parent_uuid == dest_dir_matter.uuid:
        logger.info('%s is already in place, nothing to move', src_matter.path)
        return src_matter

    storage = get_storage()
    old_path = src_matter.path
    new_path = join_path(dest_dir_matter.path, src_matter.name)
    new_storage_name = storage_name(src_matter.username, new_path)
    _ensure_vacant(storage, new_storage_name)

    try:
        storage.makedirs(matter_storage_name(dest_dir_matter))
        storage.rename(matter_storage_name(src_matter), new_storage_name)
    except OSError as error:
        raise MatterIOError(f'Failed to move {old_path} to {new_path}') from error

    if not src_matter.is_dir:
        delete_by_matter(src_matter)

    src_matter.parent_uuid = dest_dir_matter.uuid
    src_matter.path = new_path
    src_matter.save(update_fields=['parent_uuid', 'path', 'updated_at'])
    logger.info('Moved %s to %s', old_path, new_path)

    if src_matter.is_dir:
        adjust_descendant_paths(src_matter)
    return src_matter


def atomic_move(
    src_matter: Matter,
    dest_dir_matter: Matter,
    overwrite: bool = False,
) -> Matter:
    """Move a matter while holding the owner's matter lock.

    Args:
        src_matter: File or directory to move.
        dest_dir_matter: Destination directory.
        overwrite: Replace a matter already stored at the destination.

    Returns:
        The moved Matter.

    Raises:
        MatterValidationError: If the moved subtree would be nested too
            deep.
        MatterConflictError: If a directory would be moved into itself or
            one of its descendants, or the destination is taken.
    """
    src_matter = _require_matter(src_matter, 'Source')

    with matter_lock(src_matter.user_id):
        dest_dir_matter = _require_directory(dest_dir_matter, 'Destination')
        _require_not_root(src_matter, 'moved')
        _require_same_owner(dest_dir_matter, src_matter.user_id)

        if is_same_or_descendant(dest_dir_matter, src_matter):
            raise MatterConflictError(
                'A directory can not be moved into itself or into one of '
                'its sub-directories',
            )

        if src_matter.parent_uuid == dest_dir_matter.uuid:
            return src_matter

        _require_depth_fits(src_matter, dest_dir_matter)
        handle_overwrite(
            src_matter.user_id,
            join_path(dest_dir_matter.path, src_matter.name),
            overwrite,
            protected=src_matter,
        )
        return move(src_matter, dest_dir_matter)


def atomic_move_batch(
    src_matters: Iterable[Matter],
    dest_dir_matter: Matter,
) -> list[Matter]:
    """Move several matters into one directory under a single lock.

    All items are checked before the first one moves. A failure while
    moving stops the batch; items already moved stay moved.

    Args:
        src_matters: Files and directories to move.
        dest_dir_matter: Destination directory.

    Returns:
        The moved matters, in the given order.

    Raises:
        MatterValidationError: If an item's subtree would be nested too
            deep.
        MatterConflictError: If an item would be moved into itself or
            one of its descendants, or its name is taken at the
            destination.
    """
    dest_dir_matter = _require_matter(dest_dir_matter, 'Destination')

    with matter_lock(dest_dir_matter.user_id):
        if src_matters is None:
            raise MatterValidationError('Source matters are required')
        src_matters = list(src_matters)
        dest_dir_matter = _require_directory(dest_dir_matter, 'Destination')

        dest_lineage = set(lineage_uuids(dest_dir_matter))
        incoming_names: set[str] = set()
        for src_matter in src_matters:
            _require_not_root(src_matter, 'moved')
            _require_same_owner(src_matter, dest_dir_matter.user_id)
            if src_matter.uuid in dest_lineage:
                raise MatterConflictError(
                    'A directory can not be moved into itself or into one '
                    'of its sub-directories',
                )
            if src_matter.parent_uuid == dest_dir_matter.uuid:
                continue

            _require_depth_fits(src_matter, dest_dir_matter)

            destination_path = join_path(dest_dir_matter.path, src_matter.name)
            taken = Matter.objects.find_by_path(
                dest_dir_matter.user_id,
                destination_path,
            )
            if taken is not None or src_matter.name in incoming_names:
                raise MatterConflictError(
                    f'{destination_path} already exists, operation failed',
                )
            incoming_names.add(src_matter.name)

        return [move(src_matter, dest_dir_matter) for src_matter in src_matters]


def copy(src_matter: Matter, dest_dir_matter: Matter, name: str) -> Matter:
    """Duplicate a matter inside a directory under a new name.

    Ignores the overwrite policy and the lock. Directories are copied
    with an explicit worklist; children keep their names. Every copy gets
    a new identifier and an empty content hash.

    Args:
        src_matter: File or directory to copy.
        dest_dir_matter: Destination directory.
        name: Name of the top-level copy.

    Returns:
        The top-level copied Matter.

    Raises:
        MatterIOError: If a physical copy fails.
    """
    storage = get_storage()
    pending = [(src_matter, dest_dir_matter, name)]
    top_copy: Matter | None = None

    while pending:
        source, target_dir, target_name = pending.pop()
        target_path = join_path(target_dir.path, target_name)
        target_storage_name = storage_name(target_dir.username, target_path)

        try:
            if source.is_dir:
                storage.makedirs(target_storage_name)
            else:
                storage.copy(matter_storage_name(source), target_storage_name)
        except OSError as error:
            raise MatterIOError(
                f'Failed to copy {source.path} to {target_path}',
            ) from error

        try:
            with transaction.atomic():
                copied = Matter.objects.create(
                    parent_uuid=target_dir.uuid,
                    user_id=source.user_id,
                    username=source.username,
                    is_dir=source.is_dir,
                    name=target_name,
                    path=target_path,
                    size=source.size,
                    privacy=source.privacy,
                    content_hash='',
                )
        except Exception:
            logger.exception(
                'Database insert failed, rolling back copy: %s',
                target_storage_name,
            )
            if not source.is_dir:
                storage.rollback_upload(target_storage_name)
            raise

        if top_copy is None:
            top_copy = copied

        if source.is_dir:
            pending.extend(
                (child, copied, child.name)
                for child in Matter.objects.children_of(source)
            )

    logger.info('Copied %s to %s', src_matter.path, top_copy.path)
    return top_copy


def atomic_copy(
    src_matter: Matter,
    dest_dir_matter: Matter,
    name: str,
    overwrite: bool = False,
) -> Matter:
    """Copy a matter while holding the owner's matter lock.

    The overwrite policy is applied to the top-level destination only.

    Args:
        src_matter: File or directory to copy.
        dest_dir_matter: Destination directory.
        name: Name of the copy.
        overwrite: Replace a matter already stored at the destination.

    Returns:
        The top-level copied Matter.

    Raises:
        MatterValidationError: If an argument is missing or invalid, or
            the copied subtree would be nested too deep.
        MatterConflictError: If a directory would be copied into itself
            or one of its descendants, or the destination is taken.
    """
    src_matter = _require_matter(src_matter, 'Source')

    with matter_lock(src_matter.user_id):
        dest_dir_matter = _require_directory(dest_dir_matter, 'Destination')
        _require_not_root(src_matter, 'copied')
        _require_same_owner(dest_dir_matter, src_matter.user_id)
        name = normalize_matter_name(name)

        if src_matter.is_dir and is_same_or_descendant(
            dest_dir_matter,
            src_matter,
        ):
            raise MatterConflictError(
                'A directory can not be copied into itself or into one of '
                'its sub-directories',
            )

        _require_depth_fits(src_matter, dest_dir_matter)

        handle_overwrite(
            src_matter.user_id,
            join_path(dest_dir_matter.path, name),
            overwrite,
            protected=src_matter,
        )
        return copy(src_matter, dest_dir_matter, name)


def atomic_rename(matter: Matter, name: str, user: _User) -> Matter:
    """Change the name of a matter while holding the user's matter lock.

    Args:
        matter: File or directory to rename.
        name: New name, surrounding whitespace ignored.
        user: Owner of the matter.

    Returns:
        The renamed Matter.

    Raises:
        MatterValidationError: If the name is invalid.
        MatterConflictError: If the name is unchanged or taken by a
            sibling of the same kind.
        MatterIOError: If the physical rename fails.
    """
    user = _require_user(user)

    with matter_lock(user.pk):
        matter = _require_matter(matter, 'Matter')
        _require_not_root(matter, 'renamed')
        _require_same_owner(matter, user.pk)
        name = normalize_matter_name(name)

        if name == matter.name:
            raise MatterConflictError(
                'The new name is the same as the old one, operation failed',
            )

        siblings = Matter.objects.count_siblings(
            user.pk,
            matter.parent_uuid,
            matter.is_dir,
            name,
        )
        if siblings:
            raise MatterConflictError(
                f'{name} already exists, please use another name',
            )

        storage = get_storage()
        old_path = matter.path
        new_path = join_path(parent_path_of(old_path), name)
        new_storage_name = storage_name(matter.username, new_path)
        _ensure_vacant(storage, new_storage_name)

        try:
            storage.rename(matter_storage_name(matter), new_storage_name)
        except OSError as error:
            raise MatterIOError(
                f'Failed to rename {old_path} to {name}',
            ) from error

        if not matter.is_dir:
            delete_by_matter(matter)

        matter.name = name
        matter.path = new_path
        matter.save(update_fields=['name', 'path', 'updated_at'])
        logger.info('Renamed %s to %s', old_path, new_path)

        if matter.is_dir:
            adjust_descendant_paths(matter)
        return matter


def delete_matter(matter: Matter) -> None:
    """Delete a matter, its descendants and their physical content.

    Does not take the lock. Physical content is removed by the
    post_delete signal handler; image caches cascade.

    Args:
        matter: File or directory to delete.

    Raises:
        MatterValidationError: If the matter is the root.
        MatterIOError: If the physical content can not be removed.
    """
    _require_not_root(matter, 'deleted')

    directories: list[Matter] = []
    pending = [matter] if matter.is_dir else []
    while pending:
        directory = pending.pop()
        directories.append(directory)
        pending.extend(
            Matter.objects.children_of(directory).filter(is_dir=True),
        )

    path = matter.path
    with transaction.atomic():
        # Deepest directories first
        for directory in reversed(directories):
            Matter.objects.children_of(directory).delete()
        matter.delete()

    logger.info('Deleted matter: %s', path)


def atomic_delete(matter: Matter) -> None:
    """Delete a matter while holding the owner's matter lock."""
    matter = _require_matter(matter, 'Matter')
    with matter_lock(matter.user_id):
        delete_matter(matter)
