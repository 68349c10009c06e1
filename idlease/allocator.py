from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from .clock import SystemClock
from .errors import NotLeased, PoolExhausted
from .lease_table import LeaseState, LeaseTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaseGrant:
    """An id handed to a caller together with its expiry (unix ms)."""
    id: int
    expires_at: int


class Allocator:
    """Hands out ids from a fixed range and reclaims them on expiry.

    The lease table and the round-robin cursor are a single unit of state
    guarded by one lock. acquire(), renew() and sweep() each hold it for
    their whole duration, so client requests and the reclaimer never
    interleave.
    """

    def __init__(self, min_id: int = 1, max_id: int = 65535, timeout_ms: int = 2000, clock=None):
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")
        self._table = LeaseTable(min_id, max_id)
        self._timeout_ms = timeout_ms
        self._clock = clock or SystemClock()
        self._cursor = 0  # index into the table, not an id
        self._lock = threading.Lock()

    @property
    def min_id(self) -> int:
        return self._table.min_id

    @property
    def max_id(self) -> int:
        return self._table.max_id

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    def acquire(self) -> LeaseGrant:
        """Lease the next free (or expired) id, starting at the cursor.

        Raises:
            PoolExhausted: every id in range is leased and unexpired.
        """
        with self._lock:
            now = self._clock.now_ms()
            size = len(self._table)
            for k in range(size):
                index = (self._cursor + k) % size
                lease_id = self._table.id_at(index)
                lease = self._table.get(lease_id)
                if lease.state is LeaseState.FREE or self._table.is_expired(lease_id, now):
                    expires_at = now + self._timeout_ms
                    self._table.mark_leased(lease_id, expires_at)
                    self._cursor = (index + 1) % size
                    logger.debug("Leased id %d until %d", lease_id, expires_at)
                    return LeaseGrant(lease_id, expires_at)

        logger.warning("Id pool exhausted (%d ids leased)", size)
        raise PoolExhausted()

    def renew(self, lease_id: int) -> LeaseGrant:
        """Push the expiry of a live lease forward by the timeout.

        Raises:
            OutOfRange: lease_id is outside [min_id, max_id].
            NotLeased: the id is free or its lease already expired.
        """
        with self._lock:
            now = self._clock.now_ms()
            lease = self._table.get(lease_id)
            if lease.state is LeaseState.FREE:
                raise NotLeased(lease_id)
            if self._table.is_expired(lease_id, now):
                overdue_ms = now - lease.expires_at
                # The holder missed its deadline; another client may already have been
                # handed this id, so the lease is gone for good.
                self._table.mark_free(lease_id)
                logger.warning("Heartbeat for id %d arrived %d ms after expiry", lease_id, overdue_ms)
                raise NotLeased(lease_id)

            expires_at = now + self._timeout_ms
            self._table.mark_leased(lease_id, expires_at)
            logger.debug("Renewed id %d until %d", lease_id, expires_at)
            return LeaseGrant(lease_id, expires_at)

    def sweep(self) -> int:
        """Free every expired lease. Returns how many were freed."""
        with self._lock:
            now = self._clock.now_ms()
            expired = [lease.id for lease in self._table if self._table.is_expired(lease.id, now)]
            for lease_id in expired:
                self._table.mark_free(lease_id)

        if expired:
            logger.debug("Sweep freed %d expired lease(s)", len(expired))
        return len(expired)
