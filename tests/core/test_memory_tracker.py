"""
Tests for MemoryTracker module
"""

import pytest

from rasterflow.core.exceptions import AllocationError
from rasterflow.core.memory_tracker import MemoryTracker


class TestMemoryTracker:
    """Test MemoryTracker functionality"""

    def test_initialization(self, tracker):
        """Test a new tracker has nothing live"""
        assert tracker.live_count == 0
        assert tracker.live_bytes == 0
        assert tracker.max_bytes is None

    def test_reserve_and_release(self, tracker):
        """Test reservations are counted until released"""
        first = tracker.reserve(100)
        second = tracker.reserve(50)

        assert first != second
        assert tracker.live_count == 2
        assert tracker.live_bytes == 150

        assert tracker.release(first) is True
        assert tracker.live_count == 1
        assert tracker.live_bytes == 50

    def test_release_twice(self, tracker):
        """Test releasing an unknown token is reported, not counted"""
        token = tracker.reserve(10)
        assert tracker.release(token) is True
        assert tracker.release(token) is False
        assert tracker.get_stats()["total_releases"] == 1

    def test_ceiling(self):
        """Test reservations beyond max_bytes are refused"""
        tracker = MemoryTracker(max_bytes=100)
        tracker.reserve(80)

        with pytest.raises(AllocationError) as exc_info:
            tracker.reserve(30)

        assert exc_info.value.requested_bytes == 30
        assert tracker.live_bytes == 80
        assert tracker.get_stats()["failed_allocations"] == 1

    def test_rollback(self, tracker):
        """Test rollback undoes a reservation without counting a release"""
        token = tracker.reserve(64)
        tracker.rollback(token)

        stats = tracker.get_stats()
        assert stats["live_buffers"] == 0
        assert stats["total_allocations"] == 0
        assert stats["total_releases"] == 0
        assert stats["failed_allocations"] == 1

    def test_peak(self, tracker):
        """Test peak bytes survive releases"""
        a = tracker.reserve(40)
        b = tracker.reserve(60)
        tracker.release(a)
        tracker.release(b)

        assert tracker.get_stats()["peak_bytes"] == 100

    def test_reset(self, tracker):
        """Test reset forgets everything"""
        tracker.reserve(10)
        tracker.reset()

        assert tracker.live_count == 0
        assert tracker.get_stats()["total_allocations"] == 0
