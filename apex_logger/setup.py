"""
Logger Setup

Builds a fully wired ApexLogger from arguments or environment variables:
- Environment preset (development/testing/production) with LOG_* overrides
- Colored console output for development, ECS JSON for production
- Delivery to an APEX application process, or to a local JSON-lines file
- Buffered entries are flushed on normal interpreter exit

Usage:
    from apex_logger import setup_logger

    log = setup_logger(level="DEBUG", apex_url="https://host/ords", app_id=100)

Environment variables:
    ENVIRONMENT: development, testing, production (default: development)
    LOG_LEVEL: OFF, PERMANENT, ERROR, WARNING, INFORMATION, DEBUG, TIMING
    JSON_LOGS: true/false - force JSON console output (default: auto)
    LOG_OUTPUT: stdout or stderr (default: stderr)
    APEX_BASE_URL: ORDS base URL; enables delivery to the LOG_ENTRY process
    APEX_APP_ID: Application id used with APEX_BASE_URL
    APEX_LOG_PROCESS: Process name (default: LOG_ENTRY)
    LOG_FILE: Path of a JSON-lines file used when no APEX_BASE_URL is set
"""
import atexit
import os
import sys
import threading

from loguru import logger

from .config import LoggerConfig
from .console import ConsoleEmitter
from .logger import ApexLogger
from .transports import ApexProcessTransport, FileTransport

# Loggers still open at interpreter exit get their buffers flushed
_open_loggers = []
_open_lock = threading.Lock()
_shutdown_registered = False

# Id loguru gives the stderr handler it installs at import
_LOGURU_DEFAULT_HANDLER = 0


def _close_all() -> None:
    with _open_lock:
        loggers = list(_open_loggers)
        _open_loggers.clear()
    for apex_logger in loggers:
        apex_logger.close()


def _register(apex_logger: ApexLogger) -> None:
    global _shutdown_registered
    with _open_lock:
        _open_loggers.append(apex_logger)
        if not _shutdown_registered:
            atexit.register(_close_all)
            _shutdown_registered = True


def _remove_default_handler() -> None:
    """Drop loguru's own stderr handler so entries are not printed twice.

    Handlers added by emitters or by the host application are left alone.
    """
    try:
        logger.remove(_LOGURU_DEFAULT_HANDLER)
    except ValueError:
        # Already removed by an earlier setup or by the host
        pass


def build_transport(apex_url: str = None, app_id=None, process_name: str = None, log_file: str = None):
    """APEX process transport if a URL is known, else a file transport, else None."""
    apex_url = apex_url or os.getenv("APEX_BASE_URL")
    if apex_url:
        return ApexProcessTransport(
            apex_url,
            app_id=app_id or os.getenv("APEX_APP_ID", "0"),
            process_name=process_name or os.getenv("APEX_LOG_PROCESS", "LOG_ENTRY"),
        )

    log_file = log_file or os.getenv("LOG_FILE")
    if log_file:
        return FileTransport(log_file)
    return None


def setup_logger(
    level: str = None,
    environment: str = None,
    json_output: bool = None,
    log_output: str = None,
    transport=None,
    apex_url: str = None,
    app_id=None,
    log_file: str = None,
    enqueue: bool = True,
    **options,
) -> ApexLogger:
    """
    Configure and return an ApexLogger.

    Args:
        level: Threshold level. Default: preset level or LOG_LEVEL env var.
        environment: Preset name. Default: ENVIRONMENT env var or "development".
        json_output: True for ECS JSON lines, False for colored text,
            None to pick JSON in production/staging or when JSON_LOGS=true.
        log_output: "stdout" or "stderr". Default: LOG_OUTPUT env var or "stderr".
        transport: Delivery transport. Default: built from apex_url/app_id or
            log_file (or their env vars); None means console fallback only.
        enqueue: Let loguru write console lines from a background thread.
        **options: Any LoggerConfig option (snake_case or camelCase).

    Returns:
        Configured ApexLogger instance.
    """
    env = (environment or os.getenv("ENVIRONMENT", "development")).lower()
    config = LoggerConfig.from_env(env)
    if level:
        config.set_level(level)
    if options:
        config.configure(options)

    use_json = json_output if json_output is not None else (
        env in ("production", "staging") or os.getenv("JSON_LOGS", "").lower() == "true"
    )
    output = (log_output or os.getenv("LOG_OUTPUT", "stderr")).lower()
    stream = sys.stdout if output == "stdout" else sys.stderr

    _remove_default_handler()

    emitter = ConsoleEmitter(sink=stream, json_output=use_json, enqueue=enqueue)
    if transport is None:
        transport = build_transport(apex_url, app_id, log_file=log_file)

    apex_logger = ApexLogger(config=config, emitter=emitter, transport=transport)
    _register(apex_logger)
    return apex_logger
