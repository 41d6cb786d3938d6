"""
Logging for Oracle APEX applications, with delivery to the APEX server.

This package provides:
- Oracle Logger compatible levels (OFF, PERMANENT, ERROR, WARNING,
  INFORMATION, DEBUG, TIMING) with a PERMANENT level that is never silenced
- Colored console output via loguru, or ECS JSON lines
- Buffered delivery to an APEX LOG_ENTRY process with linear-backoff retries
  and console fallback
- Sanitized extra data: cycle-safe, size-bounded, sensitive keys masked
- Named timers and module-scoped loggers
- APEX identity context (user, page, session) per request

Usage:
    from apex_logger import setup_logger, set_apex_context

    log = setup_logger(apex_url="https://host/ords", app_id=100)

    log.log("Page loaded", "P10", {"rows": 25})
    log.error("Save failed", "P10", {"password": "secret"})  # masked

    log.time_start("report")
    ...
    log.time_stop("report", "Reports")   # "report completed in 812.37ms"

    cart = log.create_module_logger("CartModule")
    cart.set_extra({"version": "1.0"})
    cart.warning("Item removed", {"productId": 456})

Middleware Usage (FastAPI/Starlette):
    from apex_logger import ApexContextMiddleware

    app.add_middleware(ApexContextMiddleware, log_requests=True)
"""

__version__ = "0.1.0"

from .config import LoggerConfig, ENV_PRESETS, get_env_config, validate_config
from .levels import LEVELS, normalize_level, should_log
from .sanitizer import MASK_VALUE, sanitize_data, mask_sensitive_fields
from .entry import LogEntry
from .context import (
    set_apex_context,
    clear_apex_context,
    get_apex_context,
    set_log_context,
    clear_log_context,
    get_log_context,
)
from .console import ConsoleEmitter
from .scheduling import ThreadScheduler
from .transports import Transport, ApexProcessTransport, FileTransport, DeliveryError
from .delivery import DeliveryClient, DeliveryState, PendingDelivery
from .buffer import DeliveryQueue
from .timing import TimerRegistry
from .logger import ApexLogger
from .module_logger import ModuleLogger
from .setup import setup_logger
from .instances import get_logger, logger
from .middleware import ApexContextMiddleware

__all__ = [
    # Version
    "__version__",
    # Configuration
    "LoggerConfig",
    "ENV_PRESETS",
    "get_env_config",
    "validate_config",
    # Levels
    "LEVELS",
    "normalize_level",
    "should_log",
    # Sanitizing
    "MASK_VALUE",
    "sanitize_data",
    "mask_sensitive_fields",
    # Entries and context
    "LogEntry",
    "set_apex_context",
    "clear_apex_context",
    "get_apex_context",
    "set_log_context",
    "clear_log_context",
    "get_log_context",
    # Output and delivery
    "ConsoleEmitter",
    "ThreadScheduler",
    "Transport",
    "ApexProcessTransport",
    "FileTransport",
    "DeliveryError",
    "DeliveryClient",
    "DeliveryState",
    "PendingDelivery",
    "DeliveryQueue",
    "TimerRegistry",
    # Loggers
    "ApexLogger",
    "ModuleLogger",
    "setup_logger",
    "get_logger",
    "logger",
    # Middleware
    "ApexContextMiddleware",
]
