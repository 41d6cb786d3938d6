"""
Process-wide logger instance with lazy initialization.

Usage:
    from apex_logger import get_logger, logger

    # Option 1: Pre-configured logger (set up on first use from env vars)
    logger.log("Hello", "Startup")

    # Option 2: Explicit setup with custom config
    my_logger = get_logger(level="DEBUG", force_reconfigure=True)
"""
from .logger import ApexLogger

_configured_logger = None


def get_logger(force_reconfigure: bool = False, **kwargs) -> ApexLogger:
    """
    Get or create the process-wide ApexLogger.

    On first call the logger is built with `setup_logger(**kwargs)`.
    Later calls return the same instance unless force_reconfigure=True,
    in which case the previous instance is closed first.
    """
    global _configured_logger

    if _configured_logger is None or force_reconfigure:
        from .setup import setup_logger
        if _configured_logger is not None:
            _configured_logger.close()
        _configured_logger = setup_logger(**kwargs)

    return _configured_logger


class _LazyLogger:
    """Stands in for the shared ApexLogger; `setup_logger()` runs on first attribute access."""

    def __getattr__(self, name):
        return getattr(get_logger(), name)

    def __repr__(self):
        state = "configured" if _configured_logger is not None else "not configured"
        return f"<ApexLogger proxy ({state})>"


# Importing this does not read the environment or open a transport
logger = _LazyLogger()
