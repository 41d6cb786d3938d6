"""Delivery queue: batches entries before handing them to the DeliveryClient."""
import threading
from typing import List

from .config import LoggerConfig
from .delivery import DeliveryClient
from .entry import LogEntry


class DeliveryQueue:
    """
    In-memory queue of entries not yet attempted.

    - enqueue: append; reaching `buffer_size` flushes the whole queue
    - flush: take everything, clear, deliver each entry independently
    - interval: every flush re-arms the timer, so `flush_interval` (ms) counts
      from the last flush; an enqueue arms it when none is pending; a timer
      that finds the queue empty stays idle until the next enqueue

    Entries leave the queue when their delivery is started, not when it
    succeeds. Nothing survives a process restart.
    """

    def __init__(self, config: LoggerConfig, client: DeliveryClient, scheduler=None):
        self.config = config
        self.client = client
        self.scheduler = scheduler or client.scheduler
        self._entries: List[LogEntry] = []
        self._lock = threading.RLock()
        self._timer = None
        self._generation = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def enqueue(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            if len(self._entries) >= self.config.buffer_size:
                self.flush()
            elif self._timer is None:
                self._arm()

    def flush(self) -> int:
        """Deliver all queued entries. Returns how many were handed over."""
        with self._lock:
            batch = self._entries[:]
            self._entries.clear()
            self._cancel()
            if batch:
                self._arm()

        for entry in batch:
            self.client.deliver(entry)
        return len(batch)

    def drain(self) -> List[LogEntry]:
        """Take all queued entries without delivering them."""
        with self._lock:
            batch = self._entries[:]
            self._entries.clear()
            self._cancel()
        return batch

    def clear(self) -> None:
        """Drop queued entries without delivering them."""
        with self._lock:
            self._entries.clear()
            self._cancel()

    def trim(self) -> int:
        """
        Keep only the newest `buffer_size` entries once the queue has grown past
        twice that. Returns the number of dropped entries.
        """
        with self._lock:
            limit = self.config.buffer_size
            excess = len(self._entries) - limit
            if len(self._entries) <= limit * 2 or excess <= 0:
                return 0
            del self._entries[:excess]
            return excess

    def close(self) -> None:
        with self._lock:
            self._cancel()

    def _arm(self) -> None:
        self._generation += 1
        generation = self._generation
        self._timer = self.scheduler.call_later(
            self.config.flush_interval / 1000.0, lambda: self._on_timer(generation)
        )

    def _cancel(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled too late to stop it
            if generation != self._generation:
                return
            self._timer = None
            if not self._entries:
                return
        self.flush()
