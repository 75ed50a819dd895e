"""Wall-clock source for invalidation and build timestamps.

Timestamps are whole epoch seconds. Components take a ``Clock`` callable so
tests can pin time to a specific tick.
"""

from __future__ import annotations

import time
from collections.abc import Callable

Clock = Callable[[], int]


def epoch_seconds() -> int:
    return int(time.time())
