"""
Tests for row partitioning
"""

import pytest

from rasterflow.core.exceptions import ConfigError
from rasterflow.core.utils.row_partitioner import RowRange, partition


class TestPartition:
    """Test splitting rows between workers"""

    @pytest.mark.parametrize("height", [1, 2, 3, 4, 7, 100, 101])
    def test_two_workers_cover_all_rows(self, height):
        """Test ranges are disjoint, contiguous and cover [0, height)"""
        ranges = partition(height, 2)

        assert ranges[0].start == 0
        assert ranges[-1].end == height
        for previous, current in zip(ranges, ranges[1:]):
            assert previous.end == current.start
        assert sum(len(r) for r in ranges) == height

    def test_odd_height(self):
        """Test the first worker takes the extra row"""
        assert partition(5, 2) == [RowRange(0, 3), RowRange(3, 5)]

    def test_single_row_drops_idle_worker(self):
        """Test workers without rows are left out"""
        assert partition(1, 2) == [RowRange(0, 1)]

    def test_more_workers_than_needed(self):
        """Test ceil chunking can leave trailing workers idle"""
        ranges = partition(10, 4)
        assert ranges == [RowRange(0, 3), RowRange(3, 6), RowRange(6, 9), RowRange(9, 10)]
        assert len(partition(5, 4)) == 3

    @pytest.mark.parametrize(
        "height,workers", [(0, 2), (-4, 2), (4, 0), (4, -1), (4, 2.5), (4, True), (4.0, 2)]
    )
    def test_invalid_arguments(self, height, workers):
        with pytest.raises(ConfigError):
            partition(height, workers)

    def test_row_range_helpers(self):
        row_range = RowRange(2, 5)
        assert len(row_range) == 3
        assert list(row_range) == [2, 3, 4]
        assert row_range.as_slice() == slice(2, 5)
