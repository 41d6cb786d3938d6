"""
ApexLogger: the public logging API.

Wires the pieces together:

    log() -> level filter -> LogEntry (sanitized extra, APEX context)
          -> ConsoleEmitter            (if enable_console)
          -> DeliveryQueue / Client    (if enable_server)

Every public method is wrapped so that an exception inside the logging
pipeline never reaches the caller; the raw message is written to stderr
instead.

Usage:
    from apex_logger import ApexLogger, ApexProcessTransport

    log = ApexLogger(transport=ApexProcessTransport("https://host/ords", app_id=100))
    log.log("Page rendered", "P10", {"rows": 25})
    log.error("Save failed", "P10", {"password": "x"})   # password is masked

    cart = log.create_module_logger("CartModule")
    cart.set_extra({"version": "1.0"})
    cart.warning("Item removed", {"productId": 456})
"""
import functools
import time
from typing import Any, Callable, Dict, Optional

from .buffer import DeliveryQueue
from .config import LoggerConfig
from .console import ConsoleEmitter
from .context import clear_log_context, get_log_context, set_log_context
from .delivery import DeliveryClient
from .entry import LogEntry
from .levels import normalize_level, should_log
from .scheduling import ThreadScheduler
from .timing import TimerRegistry


def _guarded(default=None):
    """Never let an exception escape a public logging call."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except Exception as exc:
                text = args[0] if args else kwargs.get("text", kwargs.get("unit", func.__name__))
                ConsoleEmitter.fallback(text, exc)
                return default
        return wrapper
    return decorator


class ApexLogger:
    """
    Args:
        config: Logger configuration. Default: LoggerConfig() defaults.
        emitter: Console emitter. Default: colored output on stderr.
        transport: Delivery transport (see transports.py). None disables
            real delivery: entries sent to the server fall back to the console.
        scheduler: Runs deferred work (retries, interval flush).
        clock: Monotonic clock in seconds used by the timers.
    """

    def __init__(
        self,
        config: LoggerConfig = None,
        emitter: ConsoleEmitter = None,
        transport=None,
        scheduler=None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.config = config or LoggerConfig()
        self.emitter = emitter or ConsoleEmitter()
        self.scheduler = scheduler or ThreadScheduler()
        self.client = DeliveryClient(self.config, transport, self.scheduler, self.emitter)
        self.queue = DeliveryQueue(self.config, self.client, self.scheduler)
        self.timers = TimerRegistry(clock)

    @property
    def transport(self):
        return self.client.transport

    @transport.setter
    def transport(self, transport) -> None:
        self.client.transport = transport

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    @_guarded()
    def log(self, text, module: str = None, extra: Any = None, level="INFORMATION") -> None:
        name = normalize_level(level)
        if not should_log(name, self.config.level):
            return

        entry = LogEntry.create(text, module, extra, name, self.config)

        if self.config.enable_console:
            self.emitter.emit(entry)

        if self.config.enable_server:
            if self.config.enable_buffer:
                self.queue.enqueue(entry)
            else:
                self.client.deliver(entry)

    def error(self, text, module: str = None, extra: Any = None) -> None:
        self.log(text, module, extra, "ERROR")

    def warning(self, text, module: str = None, extra: Any = None) -> None:
        self.log(text, module, extra, "WARNING")

    def info(self, text, module: str = None, extra: Any = None) -> None:
        self.log(text, module, extra, "INFORMATION")

    def debug(self, text, module: str = None, extra: Any = None) -> None:
        self.log(text, module, extra, "DEBUG")

    def permanent(self, text, module: str = None, extra: Any = None) -> None:
        self.log(text, module, extra, "PERMANENT")

    @_guarded()
    def log_server(self, text, module: str = None, extra: Any = None, level="INFORMATION") -> None:
        """
        Send an entry to the server whatever the configured level, skipping the
        buffer. The console still honours the level filter.
        """
        name = normalize_level(level)
        if name is None:
            return

        entry = LogEntry.create(text, module, extra, name, self.config)

        if self.config.enable_console and should_log(name, self.config.level):
            self.emitter.emit(entry)

        if self.config.enable_server:
            self.client.deliver(entry)

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------

    @_guarded()
    def time_start(self, unit: str) -> None:
        self.timers.start(unit, self.config.max_timing_units)

    @_guarded(default=0)
    def time_stop(self, unit: str, module: str = None) -> float:
        """Stop `unit`, log how long it ran and return the elapsed milliseconds (0 if never started)."""
        elapsed = self._stop_timer(unit)
        if elapsed is None:
            return 0
        self.log(self._timing_message(unit, elapsed), module, {"unit": unit, "elapsed": elapsed})
        return elapsed

    @_guarded(default=0)
    def time_stop_server(self, unit: str, module: str = None) -> float:
        """Like time_stop, but the result always goes to the server."""
        elapsed = self._stop_timer(unit)
        if elapsed is None:
            return 0
        self.log_server(self._timing_message(unit, elapsed), module, {"unit": unit, "elapsed": elapsed})
        return elapsed

    def _stop_timer(self, unit: str) -> Optional[float]:
        elapsed = self.timers.stop(unit)
        if elapsed is None:
            self.emitter.diagnostic(f"Timing unit '{unit}' was not started")
        return elapsed

    def _timing_message(self, unit: str, elapsed: float) -> str:
        return f"{unit} completed in {elapsed:.{self.config.timing_precision}f}ms"

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @_guarded()
    def configure(self, options: Dict[str, Any] = None, **kwargs) -> None:
        merged = dict(options or {})
        merged.update(kwargs)
        level = merged.get("level")
        if level is not None and normalize_level(level) is None:
            self.emitter.diagnostic(f"Invalid log level: {level}")
        self.config.configure(merged)

    @_guarded()
    def set_level(self, level) -> None:
        if not self.config.set_level(level):
            self.emitter.diagnostic(f"Invalid log level: {level}")

    @_guarded()
    def get_level(self) -> str:
        return self.config.get_level()

    @_guarded()
    def get_config(self) -> Dict[str, Any]:
        return self.config.snapshot()

    @_guarded()
    def enable_console(self, enabled: bool) -> None:
        self.config.configure(enable_console=bool(enabled))

    @_guarded(default=False)
    def is_console_enabled(self) -> bool:
        return self.config.enable_console

    # ------------------------------------------------------------------
    # Buffer and resources
    # ------------------------------------------------------------------

    @_guarded(default=0)
    def flush(self) -> int:
        """Hand every buffered entry to the delivery client now."""
        return self.queue.flush()

    @_guarded()
    def clear_buffer(self) -> None:
        self.queue.clear()
        self.cleanup_resources()

    @_guarded(default=0)
    def get_buffer_size(self) -> int:
        return len(self.queue)

    @_guarded()
    def cleanup_resources(self) -> None:
        """Drop the oldest timers past max_timing_units and trim an oversized buffer."""
        self.timers.sweep(self.config.max_timing_units)
        self.queue.trim()

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    @_guarded()
    def set_context(self, scope: str, data: Dict[str, Any] = None) -> None:
        set_log_context(scope, data)

    @_guarded()
    def clear_context(self) -> None:
        clear_log_context()

    @_guarded()
    def get_context(self) -> Optional[Dict[str, Any]]:
        return get_log_context()

    @_guarded()
    def create_module_logger(self, module: str):
        from .module_logger import ModuleLogger
        return ModuleLogger(self, module)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    @_guarded()
    def close(self) -> None:
        """
        Stop timers and make one synchronous delivery attempt for every
        buffered entry and every delivery still waiting to retry. Entries
        that fail are written to the console.
        """
        self.queue.close()
        for entry in self.queue.drain():
            self.client.send_now(entry)
        self.client.close()
        if self.transport is not None:
            self.transport.close()
        self.emitter.close()

