"""
Utility decorators and context managers.
"""

import functools
import logging
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator

logger = logging.getLogger(__name__)


@contextmanager
def timer() -> Iterator[Dict[str, int]]:
    """
    Measure elapsed wall time of a block.

    The yielded dict is filled in when the block exits, so read it after
    the ``with`` statement:

        with timer() as t:
            do_work()
        elapsed = t["ms"]
    """
    result = {"ms": 0}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["ms"] = int(round((time.perf_counter() - start) * 1000))


def log_timing(func: Callable) -> Callable:
    """Log how long ``func`` took at DEBUG level."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with timer() as t:
            result = func(*args, **kwargs)
        logger.debug(f"{func.__qualname__} took {t['ms']} ms")
        return result

    return wrapper
