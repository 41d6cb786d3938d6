"""
Server delivery with retry and console fallback

Each entry gets its own PendingDelivery, a small state machine:

    ATTEMPTING -> DELIVERED
               -> WAITING_TO_RETRY -> ATTEMPTING ...
               -> FAILED            (retries exhausted, written to console)
               -> DISCARDED         (server logging disabled when the attempt came due)

The retry counter starts at `initial_retry_count` and grows by one per
failure; while it is <= `retry_count` the next attempt runs after
`retry_delay_base * counter` milliseconds (linear backoff). With the default
counter start of 0, `retry_count = N` means at most N + 1 attempts.

Deliveries are independent: no ordering across entries, no head-of-line
blocking. Configuration is re-read when each attempt runs, not when it is
scheduled.
"""
import threading
from enum import Enum
from typing import Dict, Optional

from .config import LoggerConfig
from .console import ConsoleEmitter
from .entry import LogEntry
from .scheduling import ThreadScheduler

FALLBACK_WARNING = "Logger server failed, using console fallback"


class DeliveryState(str, Enum):
    ATTEMPTING = "attempting"
    WAITING_TO_RETRY = "waiting_to_retry"
    DELIVERED = "delivered"
    FAILED = "failed"
    DISCARDED = "discarded"


class PendingDelivery:
    """Delivery progress of a single entry."""

    def __init__(self, entry: LogEntry, max_retries: int, retries: int = 0):
        self.entry = entry
        self.max_retries = max_retries
        self.retries = retries
        self.attempts = 0
        self.state = DeliveryState.ATTEMPTING
        self.last_error: Optional[BaseException] = None

    @property
    def done(self) -> bool:
        return self.state in (DeliveryState.DELIVERED, DeliveryState.FAILED, DeliveryState.DISCARDED)

    def __repr__(self):
        return f"<PendingDelivery {self.entry.level} {self.state.value} attempts={self.attempts}>"


class DeliveryClient:
    """
    Sends entries through a transport, retrying failures and falling back
    to console output once the retries are used up.

    Args:
        config: Shared logger configuration (read live).
        transport: Object with `send(entry, default_module)`; None means
            no server is reachable and every delivery falls back at once.
        scheduler: Object with `call_later(delay_seconds, callback)`.
        emitter: Console emitter used for the fallback and its warning.
    """

    def __init__(
        self,
        config: LoggerConfig,
        transport=None,
        scheduler=None,
        emitter: ConsoleEmitter = None,
    ):
        self.config = config
        self.transport = transport
        self.scheduler = scheduler or ThreadScheduler()
        self.emitter = emitter
        self._lock = threading.Lock()
        # Insertion ordered so close() settles the oldest first
        self._in_flight: Dict[PendingDelivery, None] = {}

    @property
    def in_flight(self) -> int:
        """Number of deliveries not yet delivered, failed or discarded."""
        with self._lock:
            return len(self._in_flight)

    def deliver(self, entry: LogEntry) -> PendingDelivery:
        """Start delivering `entry`. Returns immediately; the first attempt is scheduled."""
        with self.config.lock:
            pending = PendingDelivery(
                entry,
                max_retries=self.config.retry_count,
                retries=self.config.initial_retry_count,
            )
        with self._lock:
            self._in_flight[pending] = None
        self.scheduler.call_later(0, lambda: self._attempt(pending))
        return pending

    def send_now(self, entry: LogEntry) -> PendingDelivery:
        """
        One synchronous attempt with no retries, for shutdown when timer
        threads may never get to run. Falls back to the console on failure.
        """
        pending = PendingDelivery(entry, max_retries=0, retries=0)
        with self._lock:
            self._in_flight[pending] = None
        self._attempt(pending)
        return pending

    def close(self) -> int:
        """
        Settle every delivery still in flight with one last synchronous
        attempt. Failures go to the console fallback instead of waiting for
        a retry timer that may never run. Returns how many were settled.
        """
        with self._lock:
            pending_list = [p for p in self._in_flight if not p.done]
        for pending in pending_list:
            # No retries left after this attempt
            pending.max_retries = pending.retries
            self._attempt(pending)
        return len(pending_list)

    def _finish(self, pending: PendingDelivery, state: DeliveryState) -> None:
        pending.state = state
        with self._lock:
            self._in_flight.pop(pending, None)

    def _attempt(self, pending: PendingDelivery) -> None:
        if pending.done:
            # Settled by close() before this timer fired
            return

        if not self.config.enable_server:
            self._finish(pending, DeliveryState.DISCARDED)
            return

        if self.transport is None:
            pending.last_error = RuntimeError("no delivery transport configured")
            self._give_up(pending, f"Logger server error: {pending.last_error}")
            return

        pending.state = DeliveryState.ATTEMPTING
        pending.attempts += 1
        try:
            self.transport.send(pending.entry, self.config.default_module)
        except Exception as exc:
            pending.last_error = exc
            self._on_failure(pending)
            return

        self.config.server_error = False
        self._finish(pending, DeliveryState.DELIVERED)

    def _on_failure(self, pending: PendingDelivery) -> None:
        pending.retries += 1
        if pending.retries <= pending.max_retries:
            pending.state = DeliveryState.WAITING_TO_RETRY
            delay_ms = self.config.retry_delay_base * pending.retries
            self.scheduler.call_later(delay_ms / 1000.0, lambda: self._attempt(pending))
        else:
            self._give_up(pending, FALLBACK_WARNING)

    def _give_up(self, pending: PendingDelivery, warning: str) -> None:
        self.config.server_error = True
        self._finish(pending, DeliveryState.FAILED)
        if self.config.enable_console and self.emitter is not None:
            self.emitter.diagnostic(warning)
            self.emitter.emit(pending.entry)
