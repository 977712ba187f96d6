"""
Call spacing for the rate-limited tile service
"""

import time
from typing import Callable, Optional


class Throttle:
    """Ensure successive calls are at least `min_interval_ms` apart"""

    def __init__(
        self,
        min_interval_ms: float = 150,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.min_interval_ms = min_interval_ms
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    def wait(self, min_interval_ms: Optional[float] = None):
        """Sleep off whatever is left of the interval since the previous wait"""
        interval = (self.min_interval_ms if min_interval_ms is None else min_interval_ms) / 1000.0
        if self._last_call is not None:
            elapsed = self._clock() - self._last_call
            if elapsed < interval:
                self._sleep(interval - elapsed)
        self._last_call = self._clock()
