"""Stage timing for the estimate pipeline."""
import functools
import logging
import time
from typing import Callable

logger = logging.getLogger("solar.perf")


def timed(func: Callable) -> Callable:
    """
    Decorator that measures and logs execution time of a pipeline stage.

    Usage::

        @timed
        def plan_cuts(...):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 3)
            logger.debug(
                "stage timed",
                extra={"stage": func.__qualname__, "duration_ms": duration_ms},
            )
    return wrapper
