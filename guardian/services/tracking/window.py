"""
Guardian - Sliding Window Tracker
=================================

Time-windowed event history keyed by (detector, guild_id, actor_id).

DESIGN:
    Every detector keeps its history here instead of in module globals.
    Entries are appended in timestamp order and evicted lazily on access:
    an entry is expired once `now - entry.timestamp >= window`, so a
    threshold test never sees an entry older than the window no matter
    how much traffic came before it.

    Read-modify-write sequences (record, count, maybe reset) are
    serialized per key with `lock(key)`. Keys of different detectors
    never share a lock, so the same member has independent windows per
    detector.
"""

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Tuple


WindowKey = Tuple[str, int, int]
"""(detector, guild_id, actor_id)"""


@dataclass(frozen=True)
class WindowEntry:
    """One timestamped event in a sliding window."""
    timestamp: float
    payload: Any = None


class SlidingWindowTracker:
    """
    In-memory sliding windows with per-key locks.

    Timestamps are plain floats (time.monotonic() in production); callers
    always pass `now` so tests control time explicitly.
    """

    def __init__(self) -> None:
        self._windows: Dict[WindowKey, Deque[WindowEntry]] = {}
        self._locks: Dict[WindowKey, asyncio.Lock] = {}

    # =========================================================================
    # Locking
    # =========================================================================

    def lock(self, key: WindowKey) -> asyncio.Lock:
        """Get the lock guarding one key's read-modify-write."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    # =========================================================================
    # Window Operations
    # =========================================================================

    def _evict(self, entries: Deque[WindowEntry], now: float, window: float) -> None:
        while entries and now - entries[0].timestamp >= window:
            entries.popleft()

    def record(
        self,
        key: WindowKey,
        timestamp: float,
        payload: Any = None,
        window: Optional[float] = None,
    ) -> List[WindowEntry]:
        """
        Append an event and return the resulting window.

        Args:
            key: Window key.
            timestamp: Event time.
            payload: Detector-specific data (message text, member id...).
            window: When given, entries expired relative to `timestamp`
                are evicted before returning.

        Returns:
            Ordered list of entries currently in the window.
        """
        entries = self._windows.get(key)
        if entries is None:
            entries = deque()
            self._windows[key] = entries

        entries.append(WindowEntry(timestamp, payload))
        if window is not None:
            self._evict(entries, timestamp, window)
        return list(entries)

    def current_window(self, key: WindowKey, now: float, window: float) -> List[WindowEntry]:
        """Return the ordered, non-expired entries of a key."""
        entries = self._windows.get(key)
        if not entries:
            return []
        self._evict(entries, now, window)
        return list(entries)

    def reset(self, key: WindowKey) -> None:
        """Clear a key's window after its detector fired."""
        self._windows.pop(key, None)

    def size(self, key: WindowKey) -> int:
        """Number of stored entries for a key, expired ones included."""
        entries = self._windows.get(key)
        return len(entries) if entries else 0

    def __len__(self) -> int:
        return len(self._windows)


__all__ = ["SlidingWindowTracker", "WindowEntry", "WindowKey"]
