"""Per-user operation locks.

Only one ``atomic_*`` matter operation per user runs at a time.
Operations of different users never wait for each other.

Only protects within a single process.
"""

import logging
import threading
from collections.abc import Hashable, Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import final

logger = logging.getLogger(__name__)


@final
class UserLockManager:
    """Issues one mutual-exclusion lock per user.

    Locks are created lazily on first use and never removed, so the
    registry grows with the number of users seen by the process.
    Locks are not reentrant: acquiring twice from the same call chain
    without releasing deadlocks.
    """

    def __init__(self) -> None:
        """Initialize an empty lock registry."""
        self._registry_lock = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    def _get_lock(self, user_id: Hashable) -> threading.Lock:
        with self._registry_lock:
            if user_id not in self._locks:
                self._locks[user_id] = threading.Lock()
            return self._locks[user_id]

    def acquire(self, user_id: Hashable) -> None:
        """Block until the user's lock is free, then take it.

        Args:
            user_id: Identifier of the user.
        """
        self._get_lock(user_id).acquire()
        logger.debug('Matter lock acquired for user %s', user_id)

    def release(self, user_id: Hashable) -> None:
        """Release the user's lock.

        Args:
            user_id: Identifier of the user.

        Raises:
            RuntimeError: If the lock is not held.
        """
        self._get_lock(user_id).release()
        logger.debug('Matter lock released for user %s', user_id)

    def is_locked(self, user_id: Hashable) -> bool:
        """Check if an operation currently holds the user's lock."""
        return self._get_lock(user_id).locked()

    @contextmanager
    def hold(self, user_id: Hashable) -> Iterator[None]:
        """Hold the user's lock for the duration of the block.

        The lock is released even when the block raises.

        Args:
            user_id: Identifier of the user.

        Yields:
            Nothing.
        """
        self.acquire(user_id)
        try:
            yield
        finally:
            self.release(user_id)


# Process-wide registry used by the atomic matter operations
user_locks = UserLockManager()


def matter_lock(user_id: Hashable) -> AbstractContextManager[None]:
    """Hold the process-wide matter lock of a user.

    Args:
        user_id: Identifier of the user.

    Returns:
        Context manager holding the lock.
    """
    return user_locks.hold(user_id)
