"""Shared fixtures: a manual clock scheduler, a capturing console and fake transports."""
import pytest

from apex_logger import ApexLogger, ConsoleEmitter, DeliveryError, LoggerConfig
from apex_logger.context import clear_apex_context, clear_log_context


class _Handle:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by hand: nothing runs until the test advances the clock."""

    def __init__(self):
        self.now = 0.0
        self._handles = []

    def call_later(self, delay, callback):
        handle = _Handle(self.now + max(delay, 0.0), callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self._handles if not h.cancelled]

    def _next_due(self, until):
        due = [h for h in self.pending if h.due <= until]
        return min(due, key=lambda h: h.due) if due else None

    def advance(self, seconds):
        self._run_until(self.now + seconds)

    def _run_until(self, target):
        while True:
            handle = self._next_due(target)
            if handle is None:
                break
            self._handles.remove(handle)
            self.now = max(self.now, handle.due)
            handle.callback()
        self.now = target

    def run_pending(self):
        """Run everything already due, including zero-delay work it schedules."""
        self.advance(0)

    def run_all(self, limit=1000):
        """Keep advancing until no work is left."""
        for _ in range(limit):
            if not self.pending:
                return
            self._run_until(max(min(h.due for h in self.pending), self.now))


class RecordingTransport:
    """Transport that records every attempt and can be told to fail."""

    def __init__(self, fail=False):
        self.fail = fail
        self.attempts = 0
        self.sent = []
        self.closed = False

    def send(self, entry, default_module="JS_LOGGER"):
        self.attempts += 1
        if self.fail:
            raise DeliveryError("server unavailable")
        self.sent.append(entry.transport_fields(default_module))

    def close(self):
        self.closed = True


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def console_lines():
    """(emitter, lines) where lines collects everything written to the console."""
    lines = []
    emitter = ConsoleEmitter(sink=lines.append, colorize=False)
    yield emitter, lines
    emitter.close()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def failing_transport():
    return RecordingTransport(fail=True)


@pytest.fixture
def make_logger(scheduler, console_lines):
    """Factory for an ApexLogger wired to the manual scheduler and captured console."""
    emitter, _ = console_lines

    def factory(transport=None, clock=None, **options):
        config = LoggerConfig()
        config.configure(options)
        kwargs = {"clock": clock} if clock is not None else {}
        return ApexLogger(config=config, emitter=emitter, transport=transport, scheduler=scheduler, **kwargs)

    return factory


@pytest.fixture(autouse=True)
def reset_context():
    yield
    clear_apex_context()
    clear_log_context()
