"""
APEX Environment Context

Every log entry carries the APEX identity of whoever triggered it: the
application user, the page and the session. In the browser this came from
`apex.env`; in Python it is held in context variables, which behave like
thread-local storage but also work with async code. Set it once at the start
of a request (usually in middleware) and every entry created during that
request picks it up.

Defaults ('UNKNOWN', page 0, session 0) mean "no APEX context".

A second, optional "log context" can be attached with `set_log_context()`.
It is copied onto every entry created while it is set and shown after the
message on the console.

Usage:
    from apex_logger import set_apex_context, clear_apex_context

    set_apex_context(user="SCOTT", page_id=10, session=1234567890)
    # ... all entries now carry the APEX identity ...
    clear_apex_context()
"""
import contextvars
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_USER = "UNKNOWN"
DEFAULT_PAGE = 0
DEFAULT_SESSION = 0

user_ctx: contextvars.ContextVar[str] = contextvars.ContextVar('apex_user', default=DEFAULT_USER)
page_ctx: contextvars.ContextVar[int] = contextvars.ContextVar('apex_page_id', default=DEFAULT_PAGE)
session_ctx: contextvars.ContextVar[int] = contextvars.ContextVar('apex_session', default=DEFAULT_SESSION)
app_ctx: contextvars.ContextVar[Optional[int]] = contextvars.ContextVar('apex_app_id', default=None)
log_ctx: contextvars.ContextVar[Optional[dict]] = contextvars.ContextVar('log_context', default=None)


def _as_number(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def set_apex_context(user: str = None, page_id=None, session=None, app_id=None) -> None:
    """
    Set the APEX identity for all entries created in the current context.

    Page, session and application ids arrive as strings from HTTP requests;
    values that are not numeric fall back to the defaults.
    """
    if user:
        user_ctx.set(str(user))
    if page_id is not None:
        page_ctx.set(_as_number(page_id, DEFAULT_PAGE))
    if session is not None:
        session_ctx.set(_as_number(session, DEFAULT_SESSION))
    if app_id is not None:
        app_ctx.set(_as_number(app_id, None))


def clear_apex_context() -> None:
    """Reset the APEX identity. Call in a finally block after a request."""
    user_ctx.set(DEFAULT_USER)
    page_ctx.set(DEFAULT_PAGE)
    session_ctx.set(DEFAULT_SESSION)
    app_ctx.set(None)


def get_apex_context() -> Dict[str, Any]:
    """Current APEX identity using the names of `apex.env`."""
    return {
        "APP_USER": user_ctx.get(),
        "APP_PAGE_ID": page_ctx.get(),
        "APP_SESSION": session_ctx.get(),
        "APP_ID": app_ctx.get(),
    }


def set_log_context(scope: str, data: Dict[str, Any] = None) -> None:
    log_ctx.set({
        "scope": scope,
        "data": dict(data or {}),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


def clear_log_context() -> None:
    log_ctx.set(None)


def get_log_context() -> Optional[Dict[str, Any]]:
    return log_ctx.get()
