"""LogEntry: one immutable record per logging call."""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .context import DEFAULT_PAGE, DEFAULT_SESSION, DEFAULT_USER, get_apex_context, get_log_context
from .sanitizer import sanitize_data


@dataclass(frozen=True)
class LogEntry:
    """
    A single log call, captured at creation time.

    `extra` is sanitized before the entry is built (see `create`), so it is
    always JSON-serializable and bounded in size.
    """

    level: str
    text: str
    module: Optional[str] = None
    extra: Any = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user: str = DEFAULT_USER
    page: int = DEFAULT_PAGE
    session: int = DEFAULT_SESSION
    context: Optional[Dict[str, Any]] = None

    @classmethod
    def create(cls, text, module, extra, level: str, config) -> "LogEntry":
        """Build an entry from a log call, sanitizing `extra` and reading the APEX context."""
        apex = get_apex_context()
        return cls(
            level=level,
            text=str(text),
            module=module,
            extra=sanitize_data(extra, config),
            user=apex["APP_USER"] or DEFAULT_USER,
            page=apex["APP_PAGE_ID"] or DEFAULT_PAGE,
            session=apex["APP_SESSION"] or DEFAULT_SESSION,
            context=get_log_context(),
        )

    def transport_fields(self, default_module: str = "JS_LOGGER") -> Tuple[str, str, str, str, str, str, int, int]:
        """
        The eight positional fields of the outbound LOG_ENTRY call:
        level, text, module, extra (JSON), ISO-8601 timestamp, user, page, session.
        """
        return (
            self.level,
            self.text,
            self.module or default_module,
            json.dumps(self.extra or {}),
            self.timestamp.isoformat(),
            self.user,
            self.page,
            self.session,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level,
            "text": self.text,
            "module": self.module,
            "extra": self.extra,
            "user": self.user,
            "page": self.page,
            "session": self.session,
            "context": self.context,
        }
