"""Local filesystem storage backend for the physical matter tree."""

import logging
import os
import shutil
from typing import BinaryIO, Final, final, override

from django.core.files.storage import FileSystemStorage

_CHUNK_SIZE: Final = 64 * 1024  # 64KB chunks for stream copies

logger = logging.getLogger(__name__)


@final
class MatterStorage(FileSystemStorage):
    """Filesystem storage for user matters.

    Extends Django's FileSystemStorage with:
    - Atomic renames of files and whole directory trees
    - Byte-counting stream writes
    - Recursive deletes and copies
    - Best-effort rollback of written files

    Names are relative to the storage location, e.g.
    ``alice/root/photos/cat.jpg``.
    """

    def makedirs(self, name: str) -> str:
        """Create a directory and its parents (idempotent).

        New directories get ``directory_permissions_mode`` when it is set.

        Args:
            name: Storage name of the directory.

        Returns:
            Absolute path of the directory.
        """
        directory = self.path(name)
        if self.directory_permissions_mode is None:
            os.makedirs(directory, exist_ok=True)
            return directory

        # Same umask dance as FileSystemStorage._save
        old_umask = os.umask(0o777 & ~self.directory_permissions_mode)
        try:
            os.makedirs(
                directory,
                self.directory_permissions_mode,
                exist_ok=True,
            )
        finally:
            os.umask(old_umask)
        return directory

    def is_directory(self, name: str) -> bool:
        """Check if a name is an existing directory (not a symlink to one)."""
        full_path = self.path(name)
        return os.path.isdir(full_path) and not os.path.islink(full_path)

    def write_stream(self, name: str, stream: BinaryIO) -> int:
        """Write a stream to a file, replacing any stale file there.

        Args:
            name: Storage name of the file.
            stream: Readable binary stream.

        Returns:
            Number of bytes written.

        Raises:
            IsADirectoryError: If a directory occupies the name; it is
                left untouched.
            OSError: If the file can not be written.
        """
        if self.is_directory(name):
            raise IsADirectoryError(f'Directory in the way of a file: {name}')

        full_path = self.path(name)
        if os.path.lexists(full_path):
            logger.warning('Stale file found, removing it: %s', name)
            os.remove(full_path)

        written = 0
        with open(full_path, 'wb') as destination:
            for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b''):
                destination.write(chunk)
                written += len(chunk)

        if self.file_permissions_mode is not None:
            os.chmod(full_path, self.file_permissions_mode)

        logger.info('Wrote %d bytes to storage: %s', written, name)
        return written

    def rename(self, old_name: str, new_name: str) -> None:
        """Rename a file or a directory tree in one filesystem call.

        Args:
            old_name: Current storage name.
            new_name: New storage name.

        Raises:
            OSError: If the rename fails.
        """
        try:
            os.rename(self.path(old_name), self.path(new_name))
        except OSError:
            logger.exception('Rename failed: %s -> %s', old_name, new_name)
            raise
        logger.info('Renamed in storage: %s -> %s', old_name, new_name)

    def copy(self, source: str, destination: str) -> None:
        """Copy file content and permissions to a new name.

        Args:
            source: Storage name of the file to copy.
            destination: Storage name of the copy.

        Raises:
            OSError: If the copy fails.
        """
        try:
            shutil.copy2(self.path(source), self.path(destination))
        except OSError:
            logger.exception('Copy failed: %s -> %s', source, destination)
            raise
        logger.info('Copied in storage: %s -> %s', source, destination)

    @override
    def delete(self, name: str) -> None:
        """Delete a file or a whole directory tree.

        Missing names are ignored.

        Args:
            name: Storage name of the file or directory.

        Raises:
            OSError: If the delete fails.
        """
        full_path = self.path(name)
        try:
            logger.info('Deleting from storage: %s', name)
            if os.path.isdir(full_path) and not os.path.islink(full_path):
                shutil.rmtree(full_path)
            else:
                super().delete(name)
        except FileNotFoundError:
            logger.warning('Not found in storage (already deleted?): %s', name)
        except OSError:
            logger.exception('Failed to delete from storage: %s', name)
            raise

    def rollback_upload(self, name: str) -> None:
        """Delete a written file after a later step failed.

        This is a best-effort operation - if deletion fails, the error
        is logged but not raised, so the first failure propagates.

        Only regular files are removed: an upload never writes a
        directory, so one found under ``name`` is not the upload's.

        Args:
            name: Storage name of file to delete.
        """
        if self.is_directory(name):
            logger.warning('Not rolling back a directory: %s', name)
            return

        try:
            logger.warning('Rolling back upload, deleting file: %s', name)
            self.delete(name)
        except OSError:
            # The file stays on disk without a matter row
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                name,
            )
