"""
Lightweight observability utilities.

Every intent handler, leave-store write and generation call produces a
structured latency record so that a slow or failing turn can be
reconstructed from the logs alone.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager

logger = logging.getLogger("hr_buddy.trace")


@contextmanager
def trace_span(name: str, **metadata):
    """
    Measure execution duration of an operation.

    Example log:
    [TRACE] generation duration_ms=812.40 session=s1

    Always logs completion, also when the body raises, and never
    suppresses the exception.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000

        meta = " ".join(f"{k}={v}" for k, v in metadata.items())
        logger.info("[TRACE] %s duration_ms=%.2f %s", name, duration_ms, meta)
