"""
Wall-clock helpers for processing metadata.

Resolution timestamps are operational only: they describe when the pipeline
ran, never anything about the character itself.
"""

import time
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get the current wall-clock time as a UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """
    Format a timestamp for processing metadata.

    Args:
        ts: Timestamp to format

    Returns:
        ISO8601 formatted string
    """
    return ts.isoformat()


def monotonic_ms() -> float:
    """Monotonic clock reading in milliseconds, for step durations."""
    return time.perf_counter() * 1000.0


def elapsed_ms(start_ms: float, end_ms: Optional[float] = None) -> float:
    """
    Calculate elapsed milliseconds between two monotonic readings.

    Args:
        start_ms: Reading taken with monotonic_ms()
        end_ms: Later reading, defaults to now

    Returns:
        Elapsed time in milliseconds, never negative
    """
    if end_ms is None:
        end_ms = monotonic_ms()

    return max(end_ms - start_ms, 0.0)
