"""Logging wrapper shared by the toolsets' `call_tool` implementations."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_logged(name: str, tool_args: dict[str, Any], func: Callable[[], T]) -> T:
    """Run a tool body, logging its arguments, duration and failures."""
    logger.debug("Executing tool `%s` with parameters: %s", name, tool_args)
    start = time.perf_counter()
    try:
        result = func()
    except Exception:
        elapsed = (time.perf_counter() - start) * 1000
        logger.error("Tool `%s` failed after %.2fms", name, elapsed, exc_info=True)
        raise
    elapsed = (time.perf_counter() - start) * 1000
    logger.debug("Tool `%s` completed in %.2fms", name, elapsed)
    return result
