"""
Console output using Loguru

Writes one line per log entry with a fixed color per level:

    10:30:00 | ERROR       | [CartModule] Payment gateway unavailable {"orderId": 42}

or, with json_output=True, one ECS-style JSON object per entry for log
aggregators.

Each emitter owns a single loguru handler and tags its records with a
private key, so several emitters (or the host application's own loguru
handlers) never pick up each other's records.
"""
import json
import os
import sys
import uuid
from typing import Any, Dict

from loguru import logger

from .entry import LogEntry

# Loguru markup per level; ERROR, WARNING and DEBUG reuse loguru's own levels
LEVEL_STYLES = {
    "PERMANENT": "<magenta><bold>",
    "ERROR": "<red><bold>",
    "WARNING": "<yellow><bold>",
    "INFORMATION": "<light-blue><bold>",
    "DEBUG": "<cyan>",
    "TIMING": "<green><bold>",
}

_CUSTOM_LEVELS = {
    "PERMANENT": 45,
    "INFORMATION": 20,
    "TIMING": 15,
}

_LOGURU_LEVEL = {
    "OFF": "INFORMATION",
    "PERMANENT": "PERMANENT",
    "ERROR": "ERROR",
    "WARNING": "WARNING",
    "INFORMATION": "INFORMATION",
    "DEBUG": "DEBUG",
    "TIMING": "TIMING",
    "SYS_CONTEXT": "DEBUG",
    "APEX": "DEBUG",
}

_LEVEL_WIDTH = 11


def _register_levels() -> None:
    """Add the Oracle Logger level names to loguru once per process."""
    for name, no in _CUSTOM_LEVELS.items():
        try:
            logger.level(name)
        except ValueError:
            logger.level(name, no=no, color=LEVEL_STYLES[name])


def _text_format(record) -> str:
    return (
        "<green>{extra[apex_time]}</green> | "
        "<level>{extra[apex_level]: <" + str(_LEVEL_WIDTH) + "}</level> | "
        "{message}\n"
    )


def _json_format(record) -> str:
    return "{extra[apex_json]}\n"


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def build_log_dict(entry: LogEntry) -> Dict[str, Any]:
    """ECS-compatible dict for one entry."""
    log_dict = {
        "@timestamp": entry.timestamp.isoformat(),
        "log.level": entry.level,
        "log.logger": entry.module,
        "message": entry.text,
        "user.name": entry.user,
        "apex.page_id": entry.page,
        "apex.session": entry.session,
        "service.environment": os.getenv("ENVIRONMENT", "development"),
    }
    if entry.extra is not None:
        log_dict["labels"] = entry.extra
    if entry.context:
        log_dict["apex.context"] = entry.context
    return log_dict


class ConsoleEmitter:
    """
    Formats log entries and writes them through loguru.

    Args:
        sink: Anything loguru accepts as a sink (stream, path, callable).
            Default: sys.stderr.
        colorize: Force colors on/off. None lets loguru decide from the sink.
        json_output: Write ECS JSON objects instead of colored text lines.
        enqueue: Hand records to loguru's background thread (non-blocking).
        time_format: strftime format for the local time shown on text lines.
        show_extra: Append the extra payload (and log context) to text lines.
    """

    def __init__(
        self,
        sink=None,
        colorize: bool = None,
        json_output: bool = False,
        enqueue: bool = False,
        time_format: str = "%H:%M:%S",
        show_extra: bool = True,
    ):
        _register_levels()
        self.json_output = json_output
        self.time_format = time_format
        self.show_extra = show_extra
        self._key = uuid.uuid4().hex
        self._logger = logger.bind(apex_emitter=self._key)
        self._handler_id = logger.add(
            sink if sink is not None else sys.stderr,
            format=_json_format if json_output else _text_format,
            level=0,
            colorize=colorize,
            enqueue=enqueue,
            filter=self._owns,
        )

    def _owns(self, record) -> bool:
        return record["extra"].get("apex_emitter") == self._key

    def format_line(self, entry: LogEntry) -> str:
        """Message part of a text line: [module] text extra Context: {...}"""
        parts = []
        if entry.module:
            parts.append(f"[{entry.module}]")
        parts.append(entry.text)
        line = " ".join(parts)

        if self.show_extra:
            if entry.extra is not None:
                line += f" {_dumps(entry.extra)}"
            if entry.context:
                line += f" Context: {_dumps(entry.context)}"
        return line

    def emit(self, entry: LogEntry) -> None:
        level = _LOGURU_LEVEL.get(entry.level, "INFORMATION")
        bound = self._logger.bind(
            apex_time=entry.timestamp.astimezone().strftime(self.time_format),
            apex_level=entry.level,
        )
        if self.json_output:
            bound.bind(apex_json=_dumps(build_log_dict(entry))).log(level, entry.text)
        else:
            bound.log(level, self.format_line(entry))

    def diagnostic(self, message: str) -> None:
        """Warning about the logger itself (bad level, missing timer, failed delivery)."""
        entry = LogEntry(level="WARNING", text=message, module="apex_logger")
        self.emit(entry)

    @staticmethod
    def fallback(text, exc: BaseException = None) -> None:
        """
        Last resort when the logging pipeline itself failed: write the raw
        message straight to stderr, bypassing loguru.
        """
        try:
            if exc is not None:
                sys.stderr.write(f"Logger error: {exc}\n")
            sys.stderr.write(f"Original message: {text}\n")
            sys.stderr.flush()
        except Exception:
            # Nowhere left to write - the message is lost
            pass

    def close(self) -> None:
        try:
            logger.remove(self._handler_id)
        except ValueError:
            # Already removed, e.g. by the host calling logger.remove()
            pass
