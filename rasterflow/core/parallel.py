"""
Parallel Pixel Op - fork-join driver for row-partitioned transforms
"""

import logging
from threading import Thread
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

from rasterflow.core.constants import ProcessingConstants
from rasterflow.core.exceptions import ConcurrencyError, ConfigError, RasterError
from rasterflow.core.image.buffer import PixelBuffer
from rasterflow.core.utils.row_partitioner import RowRange, partition

logger = logging.getLogger(__name__)

# row_transform(buffer, row_range, context) writes rows [start, end) of buffer only
RowTransform = Callable[[PixelBuffer, RowRange, Any], None]


class _Worker:
    """One thread bound to one row range."""

    def __init__(self, index: int, buffer: PixelBuffer, row_range: RowRange,
                 row_transform: RowTransform, context: Any):
        self.index = index
        self.row_range = row_range
        self.error: Optional[Exception] = None
        self._buffer = buffer
        self._row_transform = row_transform
        self._context = context
        self.thread = Thread(
            target=self._run,
            name=f"rasterflow-worker-{index}",
            daemon=True,
        )

    def _run(self):
        try:
            self._row_transform(self._buffer, self.row_range, self._context)
        except Exception as e:
            self.error = e


class ParallelPixelOp:
    """
    Runs a per-row transform over a buffer with a fixed number of threads.

    Each worker owns a disjoint row range of the destination buffer, so the
    pixel path needs no locking. The caller sees the buffer again only after
    every worker has been joined.
    """

    def __init__(self, worker_count: int = ProcessingConstants.DEFAULT_WORKER_COUNT):
        """
        Initialize the driver.

        Args:
            worker_count: Number of threads to launch per run
        """
        if isinstance(worker_count, bool) or not isinstance(worker_count, (int, np.integer)):
            raise ConfigError(
                f"Worker count must be an integer, got {worker_count!r}",
                parameter="worker_count",
            )
        if not (
            ProcessingConstants.MIN_WORKER_COUNT
            <= worker_count
            <= ProcessingConstants.MAX_WORKER_COUNT
        ):
            raise ConfigError(
                f"Worker count must be within [{ProcessingConstants.MIN_WORKER_COUNT}, "
                f"{ProcessingConstants.MAX_WORKER_COUNT}], got {worker_count}",
                parameter="worker_count",
            )
        self.worker_count = int(worker_count)

    def run(self, buffer: PixelBuffer, row_transform: RowTransform, context: Any = None):
        """
        Partition rows, run row_transform concurrently, and join.

        Args:
            buffer: Destination buffer (rows are written by exactly one worker)
            row_transform: Callable(buffer, row_range, context)
            context: Read-only data shared by all workers

        Raises:
            ConcurrencyError: If a worker cannot be started or fails unexpectedly
            RasterError: Re-raised unchanged when a worker raises one
        """
        height = buffer.pixels.shape[0]
        ranges = partition(height, self.worker_count)
        workers: List[_Worker] = []

        try:
            for index, row_range in enumerate(ranges):
                worker = _Worker(index, buffer, row_range, row_transform, context)
                worker.thread.start()
                workers.append(worker)
        except RuntimeError as e:
            logger.error(f"Failed to start worker {len(workers)} of {len(ranges)}: {e}")
            self._join(workers)
            raise ConcurrencyError(
                f"Failed to start worker {len(workers)} of {len(ranges)}; "
                f"{self._describe(workers)} already processed"
            ) from e

        self._join(workers)

        failures = [w for w in workers if w.error is not None]
        if failures:
            first = failures[0]
            logger.error(
                f"Worker {first.index} failed on rows "
                f"[{first.row_range.start}, {first.row_range.end}): {first.error}"
            )
            if isinstance(first.error, RasterError):
                raise first.error
            raise ConcurrencyError(
                f"Worker {first.index} failed on rows "
                f"[{first.row_range.start}, {first.row_range.end}): {first.error}"
            ) from first.error

        logger.debug(
            f"{getattr(row_transform, '__name__', 'row_transform')} finished "
            f"over {len(workers)} workers: {self._describe(workers)}"
        )

    @staticmethod
    def _join(workers: List[_Worker]):
        for worker in workers:
            worker.thread.join()

    @staticmethod
    def _describe(workers: List[_Worker]) -> str:
        spans: List[Tuple[int, int]] = [(w.row_range.start, w.row_range.end) for w in workers]
        return ", ".join(f"rows [{s}, {e})" for s, e in spans) or "no rows"
