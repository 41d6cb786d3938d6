"""
APEX Context Middleware

Starlette/FastAPI middleware that sets the APEX identity (user, page,
session, application) for the duration of each request, so every entry
logged while handling it carries that identity. The context is always
cleared afterwards, even when the handler raises.

Identity is read from request headers, falling back to the APEX query
parameters (p_flow_id, p_flow_step_id, p_instance) that APEX itself sends.

Usage:
    from apex_logger import ApexContextMiddleware

    app.add_middleware(
        ApexContextMiddleware,
        user_header="x-apex-user",
        log_requests=True,   # one INFORMATION entry per request with its duration
    )
"""
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .context import clear_apex_context, set_apex_context


def _first(request: Request, header: str, query_param: str) -> Optional[str]:
    """Header value if present, else the query parameter."""
    value = request.headers.get(header)
    if value:
        return value.strip()
    return request.query_params.get(query_param)


class ApexContextMiddleware(BaseHTTPMiddleware):
    """
    Args:
        app: The ASGI application
        user_header: Header carrying APP_USER
        page_header: Header carrying APP_PAGE_ID (query fallback: p_flow_step_id)
        session_header: Header carrying APP_SESSION (query fallback: p_instance)
        app_header: Header carrying APP_ID (query fallback: p_flow_id)
        log_requests: Log "METHOD path -> status" with the duration for every request
        apex_logger: Logger used with log_requests. Default: the process-wide logger
    """

    def __init__(
        self,
        app,
        user_header: str = "x-apex-user",
        page_header: str = "x-apex-page-id",
        session_header: str = "x-apex-session",
        app_header: str = "x-apex-app-id",
        log_requests: bool = False,
        apex_logger=None,
    ):
        super().__init__(app)
        self.user_header = user_header
        self.page_header = page_header
        self.session_header = session_header
        self.app_header = app_header
        self.log_requests = log_requests
        self.apex_logger = apex_logger

    def _logger(self):
        if self.apex_logger is None:
            from .instances import logger
            return logger
        return self.apex_logger

    async def dispatch(self, request: Request, call_next):
        set_apex_context(
            user=request.headers.get(self.user_header),
            page_id=_first(request, self.page_header, "p_flow_step_id"),
            session=_first(request, self.session_header, "p_instance"),
            app_id=_first(request, self.app_header, "p_flow_id"),
        )
        method = request.method
        path = request.url.path

        try:
            start_time = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            if self.log_requests:
                extra = {
                    "http.method": method,
                    "http.path": path,
                    "http.status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
                msg = f"{method} {path} -> {response.status_code} in {duration_ms:.0f}ms"
                if response.status_code >= 500:
                    self._logger().error(msg, "HTTP", extra)
                elif response.status_code >= 400:
                    self._logger().warning(msg, "HTTP", extra)
                else:
                    self._logger().log(msg, "HTTP", extra)

            return response
        finally:
            clear_apex_context()
