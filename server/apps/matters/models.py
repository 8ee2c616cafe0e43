"""Database models for matters app."""

import uuid
from typing import Final, final, override

from django.conf import settings
from django.db import models

# Parent identifier of every top-level matter (the root is never stored)
MATTER_ROOT: Final = 'root'

MATTER_NAME_MAX_LENGTH: Final = 200
MATTER_NAME_MAX_DEPTH: Final = 32

# Constants for field max lengths
_UUID_MAX_LENGTH: Final = 36
_USERNAME_MAX_LENGTH: Final = 150
_PATH_MAX_LENGTH: Final = (MATTER_NAME_MAX_LENGTH + 1) * MATTER_NAME_MAX_DEPTH
_CONTENT_HASH_MAX_LENGTH: Final = 64
_CACHE_MODE_MAX_LENGTH: Final = 512
_CACHE_PATH_MAX_LENGTH: Final = 1024


def new_uuid() -> str:
    """Generate identifier for a new matter."""
    return str(uuid.uuid4())


class MatterQuerySet(models.QuerySet['Matter']):
    """Lookups used by the matter operations.

    Pure data access: no business rules live here.
    """

    def check_by_uuid(self, matter_uuid: str) -> 'Matter':
        """Get matter by identifier.

        Args:
            matter_uuid: Identifier of the matter.

        Returns:
            Matter instance.

        Raises:
            Matter.DoesNotExist: If no matter has this identifier.
        """
        return self.get(uuid=matter_uuid)

    def count_siblings(
        self,
        user_id: int,
        parent_uuid: str,
        is_dir: bool,
        name: str,
    ) -> int:
        """Count matters of one kind named ``name`` inside a directory."""
        return self.filter(
            user_id=user_id,
            parent_uuid=parent_uuid,
            is_dir=is_dir,
            name=name,
        ).count()

    def children_of(self, directory: 'Matter') -> 'MatterQuerySet':
        """Direct children of a directory (root included)."""
        return self.filter(
            user_id=directory.user_id,
            parent_uuid=directory.uuid,
        )

    def find_by_path(self, user_id: int, path: str) -> 'Matter | None':
        """Find the matter stored at a relative path, if any."""
        return self.filter(user_id=user_id, path=path).first()

    def find_child_directory(
        self,
        directory: 'Matter',
        name: str,
    ) -> 'Matter | None':
        """Find a sub-directory of ``directory`` by name, if any."""
        return self.children_of(directory).filter(
            is_dir=True,
            name=name,
        ).first()


@final
class Matter(models.Model):
    """A file or a directory in a user's virtual tree.

    ``path`` is denormalized: it always equals the parent's path plus
    ``'/' + name`` and has to be re-stamped on every descendant when a
    directory is moved or renamed. The physical location of the matter is
    ``<storage root>/<username>/root<path>``.
    """

    uuid = models.CharField(
        primary_key=True,
        max_length=_UUID_MAX_LENGTH,
        default=new_uuid,
        editable=False,
    )

    parent_uuid = models.CharField(
        max_length=_UUID_MAX_LENGTH,
        default=MATTER_ROOT,
        help_text='Identifier of the containing directory or "root"',
    )

    # Owner relationship (username is denormalized for path building)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='matters',
        db_index=True,
    )
    username = models.CharField(max_length=_USERNAME_MAX_LENGTH)

    is_dir = models.BooleanField(default=False)

    name = models.CharField(max_length=MATTER_NAME_MAX_LENGTH)

    path = models.CharField(
        max_length=_PATH_MAX_LENGTH,
        help_text='Path from the user root: /folder/file.ext',
    )

    size = models.BigIntegerField(
        default=0,
        help_text='File size in bytes (not maintained for directories)',
    )

    privacy = models.BooleanField(default=True)

    content_hash = models.CharField(
        max_length=_CONTENT_HASH_MAX_LENGTH,
        blank=True,
        default='',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MatterQuerySet.as_manager()

    class Meta:
        """Model metadata."""

        verbose_name = 'Matter'  # type: ignore[mutable-override]
        verbose_name_plural = 'Matters'  # type: ignore[mutable-override]
        ordering = ['-is_dir', 'name']

        indexes = [
            # Optimize directory listing queries
            models.Index(
                fields=['user', 'parent_uuid'],
                name='matters_user_parent_idx',
            ),
            # Optimize overwrite lookups
            models.Index(
                fields=['user', 'path'],
                name='matters_user_path_idx',
            ),
        ]

        constraints = [
            # Siblings of the same kind never share a name
            models.UniqueConstraint(
                fields=['user', 'parent_uuid', 'is_dir', 'name'],
                name='matters_sibling_name_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.username}:{self.path or "/"}'

    @property
    def is_root(self) -> bool:
        """Whether this is the synthesized root directory."""
        return self.uuid == MATTER_ROOT


@final
class ImageCache(models.Model):
    """Derived image artifact (thumbnail, resize) of a file matter.

    Keyed on the matter, so it has to be dropped whenever the file's
    path or content changes.
    """

    matter = models.ForeignKey(
        Matter,
        on_delete=models.CASCADE,
        related_name='image_caches',
    )

    mode = models.CharField(
        max_length=_CACHE_MODE_MAX_LENGTH,
        help_text='Processing parameters, e.g. resize_fill,w_100,h_100',
    )

    path = models.CharField(
        max_length=_CACHE_PATH_MAX_LENGTH,
        help_text='Storage name of the cached artifact',
    )

    size = models.BigIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Image Cache'  # type: ignore[mutable-override]
        verbose_name_plural = 'Image Caches'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.matter_id}:{self.mode}'


# Uploads are unlimited unless a limit is configured
_UNLIMITED: Final = -1


@final
class UserQuota(models.Model):
    """Upload size limit for a user.

    A negative limit means the user may upload files of any size.
    The limit applies to the byte count of each single upload.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='quota',
        primary_key=True,
    )

    size_limit = models.BigIntegerField(
        default=_UNLIMITED,
        help_text='Maximum bytes per upload, negative for unlimited',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'User Quota'  # type: ignore[mutable-override]
        verbose_name_plural = 'User Quotas'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.get_username()}: {self.size_limit}'

    def is_unlimited(self) -> bool:
        """Check if uploads are unlimited."""
        return self.size_limit < 0

    def allows(self, size_bytes: int) -> bool:
        """Check if an upload of the given size fits the limit.

        Args:
            size_bytes: Size of the upload in bytes.

        Returns:
            True if the upload is allowed, False otherwise.
        """
        return self.is_unlimited() or size_bytes <= self.size_limit
