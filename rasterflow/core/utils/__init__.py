"""
Utility modules for core functionality.

Modules:
- decorators: timing helpers (timer, log_timing)
- row_partitioner: split image rows between workers
"""

from .decorators import log_timing, timer
from .row_partitioner import RowRange, partition

__all__ = ["timer", "log_timing", "RowRange", "partition"]
