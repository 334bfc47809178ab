"""
Per-key serialization for read-modify-write on lots.

Two operations against the same lot must apply in the order they were
issued; operations on different lots proceed in parallel.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

from vaccine_kernel.logging_config import get_logger

logger = get_logger("modules.inventory.locks")


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class LotLockRegistry:
    """
    One ``threading.Lock`` per key, created on first use.

    Keys are lot ids, or ``("receipt", idempotency_key)`` tuples for
    receive operations.  An entry is counted while a thread holds or waits
    on it and evicted when the count drops to zero, so the registry only
    tracks keys currently in use.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _Entry] = {}

    def _checkout(self, key: Hashable) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry()
                self._entries[key] = entry
            entry.users += 1
            return entry

    def _checkin(self, key: Hashable, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        entry = self._checkout(key)
        try:
            if not entry.lock.acquire(blocking=False):
                logger.debug("lot_lock_contended", extra={"key": str(key)})
                entry.lock.acquire()
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(key, entry)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
