"""Signal handlers for matters app."""

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.matters.exceptions import MatterIOError
from server.apps.matters.logic.paths import get_storage, matter_storage_name
from server.apps.matters.models import ImageCache, Matter

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=Matter)
def delete_matter_from_storage(
    sender: type[Matter],
    instance: Matter,
    **kwargs: object,
) -> None:
    """Delete the physical file or directory tree of a deleted matter.

    Runs for every deleted row (admin, ORM, cascades), so the physical
    tree follows the metadata. Failures propagate: inside a transaction
    the row delete is rolled back.

    Args:
        sender: The Matter model class.
        instance: The Matter instance being deleted.
        **kwargs: Additional signal arguments.

    Raises:
        MatterIOError: If the physical content can not be removed.
    """
    name = matter_storage_name(instance)
    logger.info('Deleting matter from storage after DB delete: %s', name)

    try:
        get_storage().delete(name)
    except OSError as error:
        raise MatterIOError(
            f'Failed to delete {instance.path} from storage',
        ) from error


@receiver(post_delete, sender=ImageCache)
def delete_image_cache_from_storage(
    sender: type[ImageCache],
    instance: ImageCache,
    **kwargs: object,
) -> None:
    """Delete a cached image artifact when its row is deleted.

    Args:
        sender: The ImageCache model class.
        instance: The ImageCache instance being deleted.
        **kwargs: Additional signal arguments.
    """
    if not instance.path:
        return

    try:
        get_storage().delete(instance.path)
    except OSError:
        # Log error but don't raise - the cache can be rebuilt,
        # orphaned artifacts are harmless
        logger.exception(
            'Failed to delete image cache from storage (orphaned): %s',
            instance.path,
        )
