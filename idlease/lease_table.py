from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .errors import OutOfRange


class LeaseState(Enum):
    FREE = "free"
    LEASED = "leased"


@dataclass
class Lease:
    """Lease record for a single id."""
    id: int
    state: LeaseState = LeaseState.FREE
    expires_at: int | None = None  # unix ms, only set while leased


class LeaseTable:
    """Dense table of one Lease per id in [min_id, max_id].

    Not synchronized on its own: every caller must hold the owning
    Allocator's lock for the duration of the call.
    """

    def __init__(self, min_id: int, max_id: int):
        if min_id > max_id:
            raise ValueError(f"min_id ({min_id}) must not exceed max_id ({max_id})")
        self._min = min_id
        self._max = max_id
        self._leases = [Lease(i) for i in range(min_id, max_id + 1)]

    @property
    def min_id(self) -> int:
        return self._min

    @property
    def max_id(self) -> int:
        return self._max

    def __len__(self) -> int:
        return len(self._leases)

    def __contains__(self, lease_id: object) -> bool:
        return isinstance(lease_id, int) and self._min <= lease_id <= self._max

    def __iter__(self) -> Iterator[Lease]:
        return iter(self._leases)

    def index_of(self, lease_id: int) -> int:
        if lease_id not in self:
            raise OutOfRange(lease_id, self._min, self._max)
        return lease_id - self._min

    def id_at(self, index: int) -> int:
        return self._min + index

    def get(self, lease_id: int) -> Lease:
        return self._leases[self.index_of(lease_id)]

    def mark_leased(self, lease_id: int, expires_at: int) -> None:
        lease = self.get(lease_id)
        lease.state = LeaseState.LEASED
        lease.expires_at = expires_at

    def mark_free(self, lease_id: int) -> None:
        lease = self.get(lease_id)
        lease.state = LeaseState.FREE
        lease.expires_at = None

    def is_expired(self, lease_id: int, now: int) -> bool:
        lease = self.get(lease_id)
        return lease.state is LeaseState.LEASED and lease.expires_at <= now
