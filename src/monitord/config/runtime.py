from __future__ import annotations

"""Runtime helpers for working with environment-backed configuration."""

import math
import os
from pathlib import Path
from typing import Callable, Optional, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".config" / "monitord" / ".env")

_DEFAULT_VALUES: dict[str, str] | None = None


def _load_default_values() -> dict[str, str]:
    """Load configuration values from .env-style files."""
    from .runtime_helpers import DotenvLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is not None:
        return _DEFAULT_VALUES

    defaults: dict[str, str] = {}
    for path in _DOTENV_CANDIDATES:
        for key, value in DotenvLoader.load_from_file(path).items():
            defaults.setdefault(key, value)

    _DEFAULT_VALUES = defaults
    return defaults


def _default_value(name: str) -> Optional[str]:
    """Return the default value for *name* if declared in a dotenv file."""

    return _load_default_values().get(name)


def _normalize(value: str | None, *, strip: bool) -> str | None:
    if value is None:
        return None
    return value.strip() if strip else value


def _coerce(name: str, raw_value: str, *, cast: Callable[[str], T], kind: str) -> T:
    try:
        return cast(raw_value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Environment variable {name!r} must be {kind} (got {raw_value!r})") from exc


def env_str(
    name: str,
    or_value: str | None = None,
    *,
    required: bool = False,
    strip: bool = True,
    allow_blank: bool = False,
) -> str | None:
    """Fetch an environment variable as a string with validation."""

    value = _normalize(os.getenv(name), strip=strip)

    if value is None or (not allow_blank and value == ""):
        configured_default = _default_value(name)
        if configured_default is not None:
            value = _normalize(configured_default, strip=strip)

    if value is None or (not allow_blank and value == ""):
        if required:
            raise ConfigurationError(f"Required environment variable {name!r} is not set")
        return or_value
    return value


def env_float(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Fetch an environment variable and coerce it to ``float``."""

    raw = env_str(name, strip=True, allow_blank=False)
    if raw is None:
        if required and or_value is None:
            raise ConfigurationError(f"Required environment variable {name!r} is not set")
        return or_value
    return _coerce(name, raw, cast=float, kind="a float")


def env_seconds(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Convenience wrapper for fetching durations stored as seconds."""

    value = env_float(name, or_value=or_value, required=required)
    if value is None:
        return None
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(f"Environment variable {name!r} must be a finite non-negative number (got {value})")
    return value
