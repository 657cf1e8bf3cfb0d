"""Revocation registry: tokens invalidated by logout.

The registry is process-local and in-memory. It is rebuilt empty on
restart and is not shared between processes, so a multi-process deployment
needs an external store instead.
"""

import logging
from datetime import datetime, timedelta

from fileuploader.core.rwlock import ReadWriteLock
from fileuploader.services.tokens import Clock, utc_now

logger = logging.getLogger(__name__)


class RevocationRegistry:
    """Concurrency-safe set of revoked token strings.

    Entries are kept for ``retention`` after revocation and dropped on the
    next ``revoke`` call after that. A token cannot validate past its own
    expiry anyway, so ``retention`` must be the session lifetime.

    ``is_revoked`` calls share the lock; ``revoke`` holds it exclusively for
    the insert and the cleanup scan.
    """

    def __init__(self, retention: timedelta = timedelta(hours=24), clock: Clock = utc_now):
        self.retention = retention
        self._clock = clock
        self._entries: dict[str, datetime] = {}
        self._lock = ReadWriteLock()

    def revoke(self, token: str) -> None:
        """Mark a token revoked. Idempotent; a repeat call refreshes the timestamp."""
        with self._lock.write_locked():
            now = self._clock()
            self._entries[token] = now
            removed = self._cleanup(now)
        if removed:
            logger.debug(f"Dropped {removed} revocation entries older than {self.retention}")

    def is_revoked(self, token: str) -> bool:
        with self._lock.read_locked():
            return token in self._entries

    def _cleanup(self, now: datetime) -> int:
        # Caller holds the write lock
        horizon = now - self.retention
        expired = [token for token, revoked_at in self._entries.items() if revoked_at < horizon]
        for token in expired:
            del self._entries[token]
        return len(expired)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)
