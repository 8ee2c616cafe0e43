"""Business logic for derived image caches."""

import logging

from server.apps.matters.models import ImageCache, Matter

logger = logging.getLogger(__name__)


def delete_by_matter(matter: Matter) -> int:
    """Drop every cached image derived from a file matter.

    Cached artifacts are keyed on the file's path and content, so they
    are dropped whenever the file moves, is renamed or is replaced.
    The artifact files are removed by the post_delete signal handler.

    Args:
        matter: File matter whose caches are invalidated.

    Returns:
        Number of cache rows deleted.
    """
    deleted, _ = ImageCache.objects.filter(matter=matter).delete()
    if deleted:
        logger.info(
            'Deleted %d image caches of matter %s',
            deleted,
            matter.uuid,
        )
    return deleted
