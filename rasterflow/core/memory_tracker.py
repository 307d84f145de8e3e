"""
Memory Tracker - Bookkeeping for live pixel buffer allocations
"""

import logging
from threading import RLock
from typing import Any, Dict, Optional

from rasterflow.core.exceptions import AllocationError

logger = logging.getLogger(__name__)


class MemoryTracker:
    """Tracks live buffer allocations and enforces an optional byte ceiling"""

    def __init__(self, max_bytes: Optional[int] = None):
        """
        Initialize Memory Tracker

        Args:
            max_bytes: Maximum number of bytes that may be live at once
                (None means unlimited)
        """
        self.max_bytes = max_bytes
        self._allocations: Dict[int, int] = {}
        self._live_bytes = 0
        self._peak_bytes = 0
        self._next_token = 1

        self.total_allocations = 0
        self.total_releases = 0
        self.failed_allocations = 0

        self.lock = RLock()

    def reserve(self, nbytes: int) -> int:
        """
        Reserve bytes for a new allocation.

        Args:
            nbytes: Size of the allocation in bytes

        Returns:
            Token identifying the reservation (pass it to release())

        Raises:
            AllocationError: If the reservation would exceed max_bytes
        """
        with self.lock:
            if self.max_bytes is not None and self._live_bytes + nbytes > self.max_bytes:
                self.failed_allocations += 1
                logger.error(
                    f"Allocation of {nbytes} bytes refused: "
                    f"{self._live_bytes}/{self.max_bytes} bytes in use"
                )
                raise AllocationError(
                    f"Memory limit exceeded: requested {nbytes} bytes with "
                    f"{self._live_bytes} of {self.max_bytes} bytes in use",
                    requested_bytes=nbytes,
                )

            token = self._next_token
            self._next_token += 1
            self._allocations[token] = nbytes
            self._live_bytes += nbytes
            self._peak_bytes = max(self._peak_bytes, self._live_bytes)
            self.total_allocations += 1
            return token

    def release(self, token: int) -> bool:
        """Release a reservation. Returns False if the token was not live."""
        with self.lock:
            nbytes = self._allocations.pop(token, None)
            if nbytes is None:
                return False
            self._live_bytes -= nbytes
            self.total_releases += 1
            return True

    def rollback(self, token: int):
        """Undo a reservation whose allocation never materialized."""
        with self.lock:
            nbytes = self._allocations.pop(token, None)
            if nbytes is not None:
                self._live_bytes -= nbytes
                self.total_allocations -= 1
                self.failed_allocations += 1

    @property
    def live_count(self) -> int:
        with self.lock:
            return len(self._allocations)

    @property
    def live_bytes(self) -> int:
        with self.lock:
            return self._live_bytes

    def get_stats(self) -> Dict[str, Any]:
        """Get allocation statistics"""
        with self.lock:
            return {
                "live_buffers": len(self._allocations),
                "live_bytes": self._live_bytes,
                "live_mb": round(self._live_bytes / 1024 / 1024, 3),
                "peak_bytes": self._peak_bytes,
                "max_bytes": self.max_bytes,
                "total_allocations": self.total_allocations,
                "total_releases": self.total_releases,
                "failed_allocations": self.failed_allocations,
            }

    def reset(self):
        """Forget every reservation (used when tearing down a process-wide tracker)"""
        with self.lock:
            self._allocations.clear()
            self._live_bytes = 0
            self._peak_bytes = 0
            self.total_allocations = 0
            self.total_releases = 0
            self.failed_allocations = 0


_default_tracker = MemoryTracker()


def get_default_tracker() -> MemoryTracker:
    """Process-wide tracker used by buffers created without an explicit one."""
    return _default_tracker
