"""
Data sanitization for the `extra` payload of a log entry.

Checks run in a fixed order:
    1. serializability - cyclic or non-JSON data becomes an error wrapper
    2. size            - oversized data becomes a truncation wrapper
    3. masking         - sensitive keys are replaced by MASK_VALUE

A truncated payload is therefore never masked, and masking only ever sees
data that serializes. `sanitize_data` never raises.
"""
import json
from typing import Any, Iterable

MASK_VALUE = "***MASKED***"
SERIALIZE_ERROR = "Could not serialize data"
TRUNCATION_SUFFIX = "..."
PREVIEW_CHARS = 100

_TRUNCATED_KEYS = {"truncated", "originalSize", "data"}
_ERROR_KEYS = {"error", "type", "preview"}


def is_sensitive_key(key: Any, sensitive_fields: Iterable[str]) -> bool:
    """True when the lowercase key contains any of the sensitive substrings."""
    key_lower = str(key).lower()
    return any(field and field.lower() in key_lower for field in sensitive_fields)


def mask_sensitive_fields(data: Any, sensitive_fields: Iterable[str], recursive: bool = False) -> Any:
    """
    Return a copy of `data` with sensitive keys masked.

    Only dicts are masked. By default only the top level is inspected; with
    `recursive=True` nested dicts and lists are walked as well.
    """
    sensitive_fields = list(sensitive_fields or [])

    if isinstance(data, list) and recursive:
        return [mask_sensitive_fields(item, sensitive_fields, recursive) for item in data]
    if not isinstance(data, dict):
        return data

    masked = {}
    for key, value in data.items():
        if is_sensitive_key(key, sensitive_fields):
            masked[key] = MASK_VALUE
        elif recursive and isinstance(value, (dict, list)):
            masked[key] = mask_sensitive_fields(value, sensitive_fields, recursive)
        else:
            masked[key] = value
    return masked


def _is_wrapper(data: Any) -> bool:
    """Already produced by a previous sanitize pass."""
    if not isinstance(data, dict):
        return False
    keys = set(data)
    if keys == _TRUNCATED_KEYS:
        return data.get("truncated") is True
    return keys == _ERROR_KEYS and data.get("error") == SERIALIZE_ERROR


def _preview(data: Any) -> str:
    try:
        return str(data)[:PREVIEW_CHARS]
    except Exception:
        return f"<{type(data).__name__}>"


def sanitize_data(data: Any, config) -> Any:
    """
    Produce a JSON-serializable, size-bounded, masked copy of `data`.

    `config` only needs the attributes `max_data_size`, `enable_data_masking`,
    `sensitive_fields` and `recursive_masking`.
    """
    if data is None:
        return data
    if _is_wrapper(data):
        return data

    try:
        serialized = json.dumps(data)
    except (TypeError, ValueError, RecursionError):
        return {
            "error": SERIALIZE_ERROR,
            "type": type(data).__name__,
            "preview": _preview(data),
        }

    max_size = config.max_data_size
    if len(serialized) > max_size:
        return {
            "truncated": True,
            "originalSize": len(serialized),
            "data": serialized[:max_size] + TRUNCATION_SUFFIX,
        }

    if not config.enable_data_masking:
        return data
    return mask_sensitive_fields(
        data,
        config.sensitive_fields,
        recursive=getattr(config, "recursive_masking", False),
    )
