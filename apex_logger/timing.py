"""Named timers: start/stop pairs keyed by a caller-chosen unit name."""
import threading
import time
from typing import Callable, Dict, Optional


class TimerRegistry:
    """
    Maps unit name -> start time from a high-resolution clock.

    Starting a unit that is already running restarts it (last write wins).
    Stopping removes the unit and returns the elapsed milliseconds, or None
    when the unit was never started.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self._starts: Dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._starts)

    def __contains__(self, unit) -> bool:
        return unit in self._starts

    def start(self, unit: str, max_units: int = None) -> None:
        with self._lock:
            # Re-insert so a restarted unit counts as the newest
            self._starts.pop(unit, None)
            self._starts[unit] = self._clock()
        if max_units:
            self.sweep(max_units)

    def stop(self, unit: str) -> Optional[float]:
        now = self._clock()
        with self._lock:
            started = self._starts.pop(unit, None)
        if started is None:
            return None
        return max((now - started) * 1000.0, 0.0)

    def sweep(self, max_units: int) -> int:
        """Drop the oldest timers beyond `max_units`. Returns how many were dropped."""
        with self._lock:
            excess = len(self._starts) - max_units
            if excess <= 0:
                return 0
            for unit in list(self._starts)[:excess]:
                del self._starts[unit]
            return excess

    def clear(self) -> None:
        with self._lock:
            self._starts.clear()
