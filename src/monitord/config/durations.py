"""Duration parsing for configuration values.

Durations are either JSON numbers (seconds) or compact strings such as
``"1m30s"``, ``"500ms"`` or ``"2h"``.
"""

import math
import re
from typing import Union

from .errors import ConfigurationError

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_PATTERN = re.compile(r"(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|ms|s|m|h))+")
_EXPECTED = "seconds as a number or a duration string like '30s', '1m30s', '500ms'"


def parse_duration(value: Union[int, float, str], field: str = "duration") -> float:
    """
    Convert a configured duration to seconds.

    Args:
        value: JSON number of seconds or duration string
        field: Config field name used in error messages

    Returns:
        Duration in seconds

    Raises:
        ConfigurationError: If the value cannot be interpreted as a finite duration
    """
    seconds = _to_seconds(value, field)
    if not math.isfinite(seconds):
        raise ConfigurationError.invalid_format(field, value, "a finite duration")
    return seconds


def _to_seconds(value: Union[int, float, str], field: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError.invalid_format(field, value, _EXPECTED)
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError as exc:
            raise ConfigurationError.invalid_format(field, value, "a finite duration") from exc
    if not isinstance(value, str):
        raise ConfigurationError.invalid_format(field, value, _EXPECTED)

    text = value.strip()
    if not text:
        raise ConfigurationError.missing_value(field)

    try:
        return float(text)
    except ValueError:
        pass

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if not _DURATION_PATTERN.fullmatch(text):
        raise ConfigurationError.invalid_format(field, value, _EXPECTED)

    total = sum(float(amount) * _UNIT_SECONDS[unit] for amount, unit in _COMPONENT_PATTERN.findall(text))
    return sign * total


def format_duration(seconds: float) -> str:
    """Render seconds in the compact form accepted by ``parse_duration``."""
    if seconds <= 0:
        return "0s"
    if seconds < 1:
        return f"{seconds * 1000:g}ms"

    whole = int(seconds)
    if whole != seconds:
        return f"{seconds:g}s"

    hours, remainder = divmod(whole, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return "".join(parts)
