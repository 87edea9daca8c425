"""Polling utilities.

Used by the supervisor to wait for a signalled worker to exit.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "wait_for_condition",
]

import time
from collections.abc import Callable

from app_launcher.constants import POLL_INTERVAL_SECONDS

DEFAULT_POLL_INTERVAL_SECONDS = POLL_INTERVAL_SECONDS


def wait_for_condition(
    condition_fn: Callable[[], bool],
    timeout_seconds: float | None,
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Wait for a condition to become true.

    Polls the condition function until it returns True or timeout is reached.
    With no timeout, polls until the condition holds, however long that takes.

    Args:
        condition_fn: Function that returns True when condition is met.
        timeout_seconds: Maximum time to wait, or None to wait indefinitely.
        poll_interval: Time between condition checks.
        sleep: Sleep function (replaceable in tests).
        clock: Monotonic clock (replaceable in tests).

    Returns:
        True if condition was met within timeout, False otherwise.
    """
    start_time = clock()
    while not condition_fn():
        if timeout_seconds is not None and clock() - start_time >= timeout_seconds:
            return False
        sleep(poll_interval)
    return True
