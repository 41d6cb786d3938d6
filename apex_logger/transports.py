"""
Delivery transports

A transport performs the actual outbound call for one entry. `send()`
returns normally on success and raises DeliveryError on failure; retries
and fallback are the DeliveryClient's job, not the transport's.

ApexProcessTransport posts to an APEX On-Demand process the same way
`apex.server.process('LOG_ENTRY', {x01..x08})` does in the browser.
FileTransport appends JSON lines to a local file for hosts without an APEX
server; writes are guarded by a file lock so several worker processes can
share one file.
"""
import json
from pathlib import Path
from typing import Optional

import httpx
from filelock import FileLock, Timeout

from .entry import LogEntry


class DeliveryError(Exception):
    """The transport could not deliver an entry."""


class Transport:
    """Base class for delivery transports."""

    def send(self, entry: LogEntry, default_module: str = "JS_LOGGER") -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class ApexProcessTransport(Transport):
    """
    Send entries to an APEX application process over HTTP.

    Args:
        base_url: ORDS base URL of the application, e.g. "https://host/ords"
        app_id: APEX application id (p_flow_id)
        page_id: Page id the process is called from (p_flow_step_id)
        session: APEX session id (p_instance)
        process_name: Name of the On-Demand process (default: LOG_ENTRY)
        timeout: Request timeout in seconds
        client: Optional pre-configured httpx.Client (cookies, proxies, auth)
    """

    def __init__(
        self,
        base_url: str,
        app_id,
        page_id=0,
        session=0,
        process_name: str = "LOG_ENTRY",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.url = base_url.rstrip("/") + "/wwv_flow.ajax"
        self.app_id = app_id
        self.page_id = page_id
        self.session = session
        self.process_name = process_name
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def build_payload(self, entry: LogEntry, default_module: str = "JS_LOGGER") -> dict:
        fields = entry.transport_fields(default_module)
        payload = {
            "p_flow_id": str(self.app_id),
            "p_flow_step_id": str(entry.page or self.page_id),
            "p_instance": str(entry.session or self.session),
            "p_request": f"APPLICATION_PROCESS={self.process_name}",
        }
        for index, value in enumerate(fields, start=1):
            payload[f"x{index:02d}"] = str(value)
        return payload

    def send(self, entry: LogEntry, default_module: str = "JS_LOGGER") -> None:
        try:
            response = self._client.post(self.url, data=self.build_payload(entry, default_module))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DeliveryError(f"{self.process_name} call failed: {exc}") from exc

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class FileTransport(Transport):
    """
    Append one JSON object per entry to `path`, process-safe via file locking.

    The object holds the eight LOG_ENTRY fields under their parameter names
    (level, text, module, extra, timestamp, user, page, session).
    """

    FIELD_NAMES = ("level", "text", "module", "extra", "timestamp", "user", "page", "session")

    def __init__(self, path: str, lock_timeout: float = 10.0):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Lock file lives next to the log file
        self.lock = FileLock(str(self.path.with_suffix(".lock")), timeout=lock_timeout)

    def send(self, entry: LogEntry, default_module: str = "JS_LOGGER") -> None:
        record = dict(zip(self.FIELD_NAMES, entry.transport_fields(default_module)))
        line = json.dumps(record, ensure_ascii=False)
        try:
            with self.lock:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except (Timeout, OSError) as exc:
            raise DeliveryError(f"Could not write to {self.path}: {exc}") from exc
