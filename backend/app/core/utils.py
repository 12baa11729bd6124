"""
Core utilities for the ride ledger backend.
"""

from __future__ import annotations

import time
from collections.abc import Iterable


def timestamp_id(taken: Iterable[str] = (), now_ms: int | None = None) -> str:
    """Generate a transaction id from the current time in milliseconds.

    Two submissions inside the same millisecond would collide, so the
    timestamp is bumped until it no longer matches an id already in use.

    Args:
        taken: Ids already held by the ledger
        now_ms: Override for the current time (milliseconds since epoch)

    Returns:
        Decimal string of the chosen timestamp
    """
    used = set(taken)
    candidate = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    while str(candidate) in used:
        candidate += 1
    return str(candidate)
