"""
Tests for the sliding window tracker.
"""

import asyncio

import pytest

from guardian.services.tracking import SlidingWindowTracker


KEY = ("spam", 1, 100)


# =============================================================================
# Window Semantics
# =============================================================================

class TestSlidingWindow:
    """Tests for eviction and ordering."""

    def test_record_returns_entries_in_order(self):
        tracker = SlidingWindowTracker()
        tracker.record(KEY, 1.0, "a")
        tracker.record(KEY, 2.0, "b")
        entries = tracker.record(KEY, 3.0, "c")

        assert [e.payload for e in entries] == ["a", "b", "c"]
        assert [e.timestamp for e in entries] == [1.0, 2.0, 3.0]

    def test_entries_older_than_window_never_counted(self):
        """Heavy older traffic must not leak into the current window."""
        tracker = SlidingWindowTracker()
        for i in range(100):
            tracker.record(KEY, float(i) * 0.01, "old")

        entries = tracker.record(KEY, 50.0, "new", window=10)

        assert [e.payload for e in entries] == ["new"]

    def test_entry_exactly_window_old_is_expired(self):
        tracker = SlidingWindowTracker()
        tracker.record(KEY, 0.0, "edge")

        assert tracker.current_window(KEY, 10.0, 10) == []

    def test_entry_just_inside_window_is_kept(self):
        tracker = SlidingWindowTracker()
        tracker.record(KEY, 0.5, "inside")

        assert len(tracker.current_window(KEY, 10.0, 10)) == 1

    def test_current_window_of_unknown_key_is_empty(self):
        assert SlidingWindowTracker().current_window(KEY, 5.0, 10) == []

    def test_reset_clears_key(self):
        tracker = SlidingWindowTracker()
        tracker.record(KEY, 1.0)
        tracker.reset(KEY)

        assert tracker.size(KEY) == 0
        assert len(tracker) == 0

    def test_keys_of_different_detectors_are_independent(self):
        tracker = SlidingWindowTracker()
        tracker.record(("spam", 1, 100), 1.0)
        tracker.record(("thread_spam", 1, 100), 1.0)
        tracker.reset(("spam", 1, 100))

        assert tracker.size(("thread_spam", 1, 100)) == 1


# =============================================================================
# Locks
# =============================================================================

class TestWindowLocks:
    """Tests for per-key locking."""

    def test_same_key_returns_same_lock(self):
        tracker = SlidingWindowTracker()
        assert tracker.lock(KEY) is tracker.lock(KEY)

    def test_different_keys_have_different_locks(self):
        tracker = SlidingWindowTracker()
        assert tracker.lock(("spam", 1, 1)) is not tracker.lock(("spam", 1, 2))

    @pytest.mark.asyncio
    async def test_lock_serializes_read_modify_write(self):
        """Concurrent increments under the lock never lose an update."""
        tracker = SlidingWindowTracker()
        counts = []

        async def bump(ts: float) -> None:
            async with tracker.lock(KEY):
                before = tracker.size(KEY)
                await asyncio.sleep(0)
                tracker.record(KEY, ts)
                counts.append(before + 1)

        await asyncio.gather(*(bump(float(i)) for i in range(10)))

        assert sorted(counts) == list(range(1, 11))
        assert tracker.size(KEY) == 10


# =============================================================================
# Eviction
# =============================================================================

class TestLazyEviction:
    """Tests for eviction happening only when a key is touched."""

    def test_expired_entries_stay_until_accessed(self):
        tracker = SlidingWindowTracker()
        tracker.record(("spam", 1, 1), 0.0)
        tracker.record(("spam", 1, 2), 0.0)

        assert tracker.size(("spam", 1, 1)) == 1

        assert tracker.current_window(("spam", 1, 1), now=100.0, window=10) == []
        assert tracker.size(("spam", 1, 1)) == 0
        assert tracker.size(("spam", 1, 2)) == 1
