from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Source of monotonic seconds for drill timing.

    Drill engines read time only through this, so tests can drive it by hand.
    """

    def now(self) -> float: ...


class RealClock:
    def now(self) -> float:
        return time.monotonic()
