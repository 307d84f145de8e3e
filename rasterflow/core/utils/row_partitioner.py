"""
Row partitioning for parallel pixel operations.

Splits an image's row range into contiguous, non-overlapping chunks,
one per worker.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Iterator, List

from rasterflow.core.exceptions import ConfigError


@dataclass(frozen=True)
class RowRange:
    """Half-open row interval [start, end)"""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end))

    def as_slice(self) -> slice:
        return slice(self.start, self.end)


def partition(height: int, worker_count: int) -> List[RowRange]:
    """
    Split [0, height) into contiguous chunks for worker_count workers.

    Chunk size is ceil(height / worker_count); worker i gets
    [i * chunk, min((i + 1) * chunk, height)). Workers that would receive
    no rows (height < worker_count) are left out.

    Args:
        height: Number of image rows (> 0)
        worker_count: Number of workers (> 0)

    Returns:
        List of RowRange covering [0, height) without gaps or overlaps

    Example:
        >>> partition(5, 2)
        [RowRange(start=0, end=3), RowRange(start=3, end=5)]
    """
    for name, value in (("height", height), ("worker_count", worker_count)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ConfigError(f"{name} must be an integer, got {value!r}", parameter=name)

    if height <= 0:
        raise ConfigError(f"Height must be positive, got {height}", parameter="height")
    if worker_count <= 0:
        raise ConfigError(
            f"Worker count must be positive, got {worker_count}", parameter="worker_count"
        )

    chunk = math.ceil(height / worker_count)
    ranges = []
    for i in range(worker_count):
        start = i * chunk
        end = min((i + 1) * chunk, height)
        if start >= end:
            break
        ranges.append(RowRange(start, end))
    return ranges
