"""Business logic for upload size limits."""

import logging
from typing import Any

from django.conf import settings

from server.apps.matters.exceptions import QuotaExceededError
from server.apps.matters.infrastructure.formatting import human_file_size
from server.apps.matters.models import UserQuota

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def get_default_size_limit() -> int:
    """Get the upload limit given to new quotas.

    Returns:
        Limit in bytes from settings, or -1 (unlimited).
    """
    return getattr(settings, 'MATTER_DEFAULT_SIZE_LIMIT', -1)


def get_or_create_quota(user: _User) -> UserQuota:
    """Get or create quota for user (on-demand creation).

    Args:
        user: User to get quota for.

    Returns:
        UserQuota instance for the user.
    """
    quota, created = UserQuota.objects.get_or_create(
        user=user,
        defaults={'size_limit': get_default_size_limit()},
    )
    if created:
        logger.info(
            'Created quota for user %s: %s per upload',
            user.username,
            human_file_size(quota.size_limit),
        )
    return quota


def set_size_limit(user: _User, size_limit: int) -> UserQuota:
    """Change a user's upload limit.

    Args:
        user: User to update.
        size_limit: New limit in bytes, negative for unlimited.

    Returns:
        Updated UserQuota instance.
    """
    quota = get_or_create_quota(user)
    quota.size_limit = size_limit
    quota.save(update_fields=['size_limit'])
    logger.info(
        'Upload limit of user %s set to %s',
        user.username,
        human_file_size(size_limit),
    )
    return quota


def check_upload_size(user: _User, size_bytes: int) -> None:
    """Check an upload's observed size against the user's limit.

    Args:
        user: Uploading user.
        size_bytes: Bytes written by the upload.

    Raises:
        QuotaExceededError: If the upload is larger than the limit.
    """
    quota = get_or_create_quota(user)

    if not quota.allows(size_bytes):
        logger.warning(
            'Upload limit exceeded for user %s: %s > %s',
            user.username,
            human_file_size(size_bytes),
            human_file_size(quota.size_limit),
        )
        raise QuotaExceededError(
            size_limit=quota.size_limit,
            size_bytes=size_bytes,
        )
