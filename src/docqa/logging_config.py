"""Logging setup and a latency-tracking decorator."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger once for the whole process."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def log_latency(operation_name: str) -> Callable:
    """Log duration and outcome of the wrapped coroutine function."""

    def decorator(func: Callable) -> Callable:
        logger = logging.getLogger(func.__module__)

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                latency_ms = (time.perf_counter() - start) * 1000
                logger.error("%s | latency_ms=%.2f | status=error | error=%s", operation_name, latency_ms, exc)
                raise
            latency_ms = (time.perf_counter() - start) * 1000
            logger.info("%s | latency_ms=%.2f | status=success", operation_name, latency_ms)
            return result

        return async_wrapper

    return decorator
