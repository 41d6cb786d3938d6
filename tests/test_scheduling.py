"""Tests that run delivery and flushing on real timer threads."""
import threading

import pytest

from apex_logger import (
    ApexLogger,
    ConsoleEmitter,
    DeliveryClient,
    DeliveryError,
    DeliveryQueue,
    DeliveryState,
    LogEntry,
    LoggerConfig,
    ThreadScheduler,
)

WAIT = 5.0


class SignallingTransport:
    """Sets `done` once `expected` sends have been made."""

    def __init__(self, expected=1, fail=False):
        self.expected = expected
        self.fail = fail
        self.attempts = 0
        self.sent = []
        self.done = threading.Event()
        self._lock = threading.Lock()

    def send(self, entry, default_module="JS_LOGGER"):
        with self._lock:
            self.attempts += 1
            if not self.fail:
                self.sent.append(entry.text)
            reached = self.attempts >= self.expected
        if reached:
            self.done.set()
        if self.fail:
            raise DeliveryError("server unavailable")


@pytest.fixture
def fallback_seen():
    """(emitter, event) where event is set when the fallback warning is written."""
    event = threading.Event()

    def sink(message):
        if "Logger server failed, using console fallback" in message:
            event.set()

    emitter = ConsoleEmitter(sink=sink, colorize=False)
    yield emitter, event
    emitter.close()


class TestThreadScheduler:
    """Tests for ThreadScheduler."""

    def test_callback_runs_on_daemon_thread(self):
        ran = threading.Event()
        seen = {}

        def callback():
            seen["thread"] = threading.current_thread()
            ran.set()

        timer = ThreadScheduler(name="test").call_later(0.01, callback)
        assert ran.wait(WAIT)
        assert seen["thread"].daemon
        assert seen["thread"].name == "test-timer"
        timer.join(WAIT)

    def test_cancel_before_due(self):
        ran = threading.Event()
        timer = ThreadScheduler().call_later(1.0, ran.set)
        timer.cancel()
        timer.join(WAIT)
        assert not ran.is_set()


class TestThreadedDelivery:
    """DeliveryClient and DeliveryQueue driven by ThreadScheduler."""

    def test_failing_transport_gets_retry_count_plus_one_attempts(self, fallback_seen):
        emitter, event = fallback_seen
        config = LoggerConfig()
        config.configure(retry_count=2, retry_delay_base=10)
        transport = SignallingTransport(expected=3, fail=True)
        client = DeliveryClient(config, transport, ThreadScheduler(), emitter)

        pending = client.deliver(LogEntry(level="ERROR", text="lost"))

        assert event.wait(WAIT)
        assert transport.attempts == 3
        assert pending.state is DeliveryState.FAILED
        assert client.in_flight == 0
        assert config.server_error is True

    def test_interval_flush_fires(self, fallback_seen):
        emitter, _ = fallback_seen
        config = LoggerConfig()
        config.configure(buffer_size=100, flush_interval=20)
        transport = SignallingTransport()
        scheduler = ThreadScheduler()
        queue = DeliveryQueue(config, DeliveryClient(config, transport, scheduler, emitter), scheduler)

        queue.enqueue(LogEntry(level="INFORMATION", text="waiting"))

        assert transport.done.wait(WAIT)
        assert transport.sent == ["waiting"]
        assert len(queue) == 0
        queue.close()

    def test_logger_with_default_scheduler(self, fallback_seen):
        emitter, _ = fallback_seen
        config = LoggerConfig()
        config.configure(enable_buffer=False)
        transport = SignallingTransport()
        log = ApexLogger(config=config, emitter=emitter, transport=transport)

        assert isinstance(log.scheduler, ThreadScheduler)
        log.error("threaded")

        assert transport.done.wait(WAIT)
        assert transport.sent == ["threaded"]
