"""Process-wide minimum-interval gate for timer-triggered jobs.

Holds the last accepted run time per job key. The state is created once at
import (process start) and never reset. A trigger arriving sooner than
``min_interval_seconds`` after the last accepted one for the same key is
refused.

A single process is assumed. Horizontally scaled deployments need a shared
lock or counter in place of this in-memory map.
"""

import threading
import time
from typing import Callable, Dict, Optional

from loguru import logger

from trust_system.config.settings import settings


class RunGate:
    """
    Per-key minimum interval between job runs (thread-safe).

    Attributes:
        min_interval_seconds: Required spacing between two accepted runs
        lock: Thread lock guarding the last-run map
    """

    def __init__(
        self,
        min_interval_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if min_interval_seconds is None:
            min_interval_seconds = settings.min_run_interval_seconds

        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._last_run: Dict[str, float] = {}
        self.lock = threading.Lock()

    def try_acquire(self, key: str) -> bool:
        """
        Record a run for ``key`` if the interval has elapsed.

        Returns:
            True if the run may proceed, False if it is too soon
        """
        with self.lock:
            now = self._clock()
            last = self._last_run.get(key)
            if last is not None and now - last < self.min_interval_seconds:
                logger.debug(
                    f"Run of {key} refused, {self.min_interval_seconds - (now - last):.1f}s remaining"
                )
                return False
            self._last_run[key] = now
            return True

    def seconds_until_allowed(self, key: str) -> float:
        with self.lock:
            last = self._last_run.get(key)
            if last is None:
                return 0.0
            return max(0.0, self.min_interval_seconds - (self._clock() - last))


# Singleton instance - shared by every job in the process
run_gate = RunGate()
