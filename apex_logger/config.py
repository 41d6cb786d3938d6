"""
Logger Configuration

A single mutable configuration record shared by every component of a logger.
It is created with defaults, optionally merged with an environment preset and
then changed at any time through `configure()`. Components read it live, so a
change made while a retry or flush is pending is seen when that work runs.

Usage:
    from apex_logger import LoggerConfig, get_env_config

    config = LoggerConfig()
    config.configure(get_env_config("production"))
    config.configure(level="DEBUG", retryCount=3)   # camelCase keys work too

Environment variables (LoggerConfig.from_env):
    ENVIRONMENT: development, testing, production (default: development)
    LOG_LEVEL: any level name, overrides the preset level
    LOG_ENABLE_SERVER: true/false
    LOG_ENABLE_CONSOLE: true/false
"""
import os
import threading
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

from .levels import normalize_level

DEFAULT_SENSITIVE_FIELDS = ["password", "token", "ssn"]

ENV_PRESETS: Dict[str, Dict[str, Any]] = {
    "development": {
        "level": "INFORMATION",
        "enable_console": True,
        "enable_server": False,
        "enable_data_masking": False,
        "max_data_size": 50000,
    },
    "testing": {
        "level": "INFORMATION",
        "enable_console": True,
        "enable_server": True,
        "enable_data_masking": True,
        "max_data_size": 20000,
    },
    "production": {
        "level": "WARNING",
        "enable_console": False,
        "enable_server": True,
        "enable_data_masking": True,
        "sensitive_fields": ["password", "token", "ssn", "credit_card", "api_key"],
        "max_data_size": 5000,
    },
}

# Keys used by the browser-side library and by host pages that still pass them
_ALIASES = {
    "level": "level",
    "enableConsole": "enable_console",
    "enableServer": "enable_server",
    "enableBuffer": "enable_buffer",
    "bufferSize": "buffer_size",
    "flushInterval": "flush_interval",
    "retryCount": "retry_count",
    "maxRetries": "retry_count",
    "initialRetryCount": "initial_retry_count",
    "retryDelayBase": "retry_delay_base",
    "enableDataMasking": "enable_data_masking",
    "sensitiveFields": "sensitive_fields",
    "recursiveMasking": "recursive_masking",
    "maxDataSize": "max_data_size",
    "maxTimingUnits": "max_timing_units",
    "timingPrecision": "timing_precision",
    "defaultModule": "default_module",
}


@dataclass
class LoggerConfig:
    """
    Runtime options of a logger.

    `flush_interval` and `retry_delay_base` are in milliseconds.
    `server_error` is informational only: it is set when an entry exhausted
    its retries and cleared by the next successful delivery.
    Unrecognized keys passed to `configure()` end up in `extras`.
    """

    level: str = "INFORMATION"
    enable_console: bool = True
    enable_server: bool = True
    enable_buffer: bool = True
    buffer_size: int = 100
    flush_interval: int = 30000
    retry_count: int = 1
    initial_retry_count: int = 0
    retry_delay_base: int = 1000
    enable_data_masking: bool = True
    sensitive_fields: List[str] = field(default_factory=lambda: list(DEFAULT_SENSITIVE_FIELDS))
    recursive_masking: bool = False
    max_data_size: int = 10000
    max_timing_units: int = 100
    timing_precision: int = 2
    default_module: str = "JS_LOGGER"
    server_error: bool = False
    extras: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self._lock = threading.RLock()

    @classmethod
    def from_env(cls, environment: str = None) -> "LoggerConfig":
        """Build a config from the ENVIRONMENT preset plus LOG_* overrides."""
        env = (environment or os.getenv("ENVIRONMENT", "development")).lower()
        config = cls()
        config.configure(ENV_PRESETS.get(env, {}))

        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            config.set_level(log_level)

        for var, key in (("LOG_ENABLE_SERVER", "enable_server"), ("LOG_ENABLE_CONSOLE", "enable_console")):
            value = os.getenv(var)
            if value is not None:
                config.configure({key: value.strip().lower() in ("1", "true", "yes", "on")})

        return config

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def configure(self, options: Optional[Dict[str, Any]] = None, **kwargs) -> None:
        """
        Merge options into the configuration (last writer wins).

        Both snake_case field names and the camelCase keys of the browser
        library are accepted. Unknown keys are kept in `extras` and ignored.
        An invalid `level` is rejected the same way `set_level` rejects it.
        """
        merged = dict(options or {})
        merged.update(kwargs)

        known = {f.name for f in fields(self)} - {"extras"}
        with self._lock:
            for key, value in merged.items():
                name = _ALIASES.get(key, key)
                if name == "level":
                    level = normalize_level(value)
                    if level is not None:
                        self.level = level
                elif name == "sensitive_fields":
                    self.sensitive_fields = list(value or [])
                elif name in known:
                    setattr(self, name, value)
                else:
                    self.extras[key] = value

    def set_level(self, level) -> bool:
        """Set the threshold. Returns False (and changes nothing) for an unknown level."""
        name = normalize_level(level)
        if name is None:
            return False
        with self._lock:
            self.level = name
        return True

    def get_level(self) -> str:
        return self.level

    def snapshot(self) -> Dict[str, Any]:
        """Plain dict copy of the current configuration."""
        with self._lock:
            data = {f.name: getattr(self, f.name) for f in fields(self)}
            data["sensitive_fields"] = list(self.sensitive_fields)
            data["extras"] = dict(self.extras)
        return data


def get_env_config(environment: str) -> Dict[str, Any]:
    """Defaults merged with the preset for `environment` (unknown names give the defaults)."""
    defaults = LoggerConfig().snapshot()
    defaults.pop("server_error")
    defaults.pop("extras")
    defaults.update(ENV_PRESETS.get(environment, {}))
    return defaults


def validate_config(options: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Check a set of options before applying them.

    Returns (is_valid, errors). Accepts snake_case and camelCase keys.
    """
    errors = []
    normalized = {_ALIASES.get(k, k): v for k, v in (options or {}).items()}

    level = normalized.get("level")
    if level and normalize_level(level) is None:
        errors.append(f"Invalid log level: {level}")

    max_data_size = normalized.get("max_data_size")
    if max_data_size is not None and (
        not isinstance(max_data_size, int) or isinstance(max_data_size, bool) or max_data_size < 100
    ):
        errors.append("max_data_size must be at least 100 bytes")

    max_timing_units = normalized.get("max_timing_units")
    if max_timing_units is not None and (
        not isinstance(max_timing_units, int) or isinstance(max_timing_units, bool) or max_timing_units < 10
    ):
        errors.append("max_timing_units must be at least 10")

    sensitive_fields = normalized.get("sensitive_fields")
    if sensitive_fields is not None and not isinstance(sensitive_fields, (list, tuple)):
        errors.append("sensitive_fields must be a list")

    return not errors, errors
