"""
Log levels and the level filter.

Weights match Oracle Logger so that thresholds configured on the database
side mean the same thing in the browser/host logger. Higher weight means
more verbose output.

    OFF          0   suppress everything (except PERMANENT)
    PERMANENT    1   always emitted, even when the threshold is OFF
    ERROR        2
    WARNING      4
    INFORMATION  8
    DEBUG       16
    TIMING      32
    SYS_CONTEXT 64
    APEX       128
"""
from typing import Optional, Union

LEVELS = {
    "OFF": 0,
    "PERMANENT": 1,
    "ERROR": 2,
    "WARNING": 4,
    "INFORMATION": 8,
    "DEBUG": 16,
    "TIMING": 32,
    "SYS_CONTEXT": 64,
    "APEX": 128,
}

_ALIASES = {
    "INFO": "INFORMATION",
    "WARN": "WARNING",
}

_BY_WEIGHT = {weight: name for name, weight in LEVELS.items()}


def normalize_level(level: Union[str, int, None]) -> Optional[str]:
    """
    Resolve a level name (any case, common aliases) or weight to its
    canonical name. Returns None for anything unrecognized.
    """
    if level is None or isinstance(level, bool):
        return None
    if isinstance(level, int):
        return _BY_WEIGHT.get(level)
    if not isinstance(level, str):
        return None
    name = level.strip().upper()
    name = _ALIASES.get(name, name)
    return name if name in LEVELS else None


def level_weight(level: Union[str, int, None]) -> Optional[int]:
    name = normalize_level(level)
    return LEVELS[name] if name is not None else None


def is_valid_level(level: Union[str, int, None]) -> bool:
    return normalize_level(level) is not None


def should_log(level: Union[str, int, None], threshold: Union[str, int, None]) -> bool:
    """
    Decide whether an entry at `level` passes the configured `threshold`.

    Unknown levels never log (fail closed). PERMANENT always logs, OFF blocks
    everything else. An unknown threshold behaves like OFF.
    """
    name = normalize_level(level)
    if name is None:
        return False
    if name == "PERMANENT":
        return True

    threshold_weight = level_weight(threshold)
    if not threshold_weight:
        return False
    return LEVELS[name] <= threshold_weight
