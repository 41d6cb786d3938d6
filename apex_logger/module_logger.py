"""Module-scoped logger with persistent extra data."""
from typing import Any, Dict


class ModuleLogger:
    """
    Logger bound to one module name.

    Every call goes through the shared ApexLogger with `module` filled in.
    Extra data set with `set_extra()` is merged into each call's extra;
    call-site keys win. A call-site payload that is not a dict is kept
    under the "data" key.

    Example:
        logger = core.create_module_logger("CartModule")
        logger.set_extra({"version": "1.0"})
        logger.log("Item added", {"productId": 123, "quantity": 2})
    """

    def __init__(self, core, module: str):
        self.core = core
        self.module = module
        self._extra: Dict[str, Any] = {}

    def set_extra(self, extra: Dict[str, Any] = None) -> None:
        self._extra = dict(extra or {})

    def get_extra(self) -> Dict[str, Any]:
        return dict(self._extra)

    def _merge(self, extra: Any) -> Any:
        if not self._extra:
            return extra
        if extra is None:
            return dict(self._extra)
        if isinstance(extra, dict):
            return {**self._extra, **extra}
        return {**self._extra, "data": extra}

    def log(self, text, extra: Any = None, level="INFORMATION") -> None:
        self.core.log(text, self.module, self._merge(extra), level)

    def info(self, text, extra: Any = None) -> None:
        self.log(text, extra, "INFORMATION")

    def warning(self, text, extra: Any = None) -> None:
        self.log(text, extra, "WARNING")

    def error(self, text, extra: Any = None) -> None:
        self.log(text, extra, "ERROR")

    def debug(self, text, extra: Any = None) -> None:
        self.log(text, extra, "DEBUG")

    def permanent(self, text, extra: Any = None) -> None:
        self.log(text, extra, "PERMANENT")

    def log_server(self, text, extra: Any = None, level="INFORMATION") -> None:
        self.core.log_server(text, self.module, self._merge(extra), level)

    def time_start(self, unit: str) -> None:
        self.core.time_start(unit)

    def time_stop(self, unit: str) -> float:
        return self.core.time_stop(unit, self.module)

    def time_stop_server(self, unit: str) -> float:
        return self.core.time_stop_server(unit, self.module)

    def __repr__(self):
        return f"<ModuleLogger {self.module}>"
