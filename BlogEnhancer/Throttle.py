#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Throttle Module:
Enforces a minimum interval between consecutive outbound requests. The first
wait returns immediately; later waits sleep out whatever is left of the interval.
"""
import time
import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class Throttle:
    """
    Fixed minimum interval between consecutive operations.

    `wait()` sleeps only for whatever is left of the interval since the
    previous `wait()` returned; work done in between counts towards it.
    The first call never sleeps. Clock and sleeper are injectable so tests
    can run without real waiting.
    """

    def __init__(self,
                 interval_s: float,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.interval_s = max(0.0, interval_s)
        self._clock = clock
        self._sleep = sleep
        self._last: Optional[float] = None

    def wait(self) -> float:
        """Blocks until the interval has passed. Returns the seconds slept."""
        slept = 0.0
        if self._last is not None:
            remaining = self.interval_s - (self._clock() - self._last)
            if remaining > 0:
                logger.debug("Throttle: sleeping %.2fs", remaining)
                self._sleep(remaining)
                slept = remaining
        self._last = self._clock()
        return slept

    def reset(self):
        self._last = None
