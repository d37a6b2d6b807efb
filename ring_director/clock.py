"""Wall-clock helper. Engine components take a ``clock`` callable so tests can freeze time."""

import time
from collections.abc import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)
