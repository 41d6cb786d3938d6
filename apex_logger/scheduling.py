"""
Deferred callbacks for flush timers and delivery retries.

Log calls never block: sending, retrying and interval flushes run later on
a daemon timer thread. Anything with the same `call_later(delay, callback)`
contract returning a handle with `cancel()` can be injected instead, e.g. an
event-loop based scheduler or a manual clock in tests.
"""
import threading
from typing import Callable


class ThreadScheduler:
    """Runs each callback on its own daemon `threading.Timer`."""

    def __init__(self, name: str = "apex-logger"):
        self.name = name

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(delay, 0.0), callback)
        timer.name = f"{self.name}-timer"
        # Daemon so pending retries never keep the process alive
        timer.daemon = True
        timer.start()
        return timer
