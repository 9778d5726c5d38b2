from __future__ import annotations

"""Exception types for configuration handling."""


class ConfigurationError(RuntimeError):
    """Raised when configuration values are missing or malformed."""

    @classmethod
    def invalid_format(cls, param_name: str, received_value: object, expected_format: str = "") -> "ConfigurationError":
        """Create error for invalid format."""
        msg = f"{param_name} has invalid format (received {received_value!r})"
        if expected_format:
            msg += f". Expected {expected_format}"
        return cls(msg)

    @classmethod
    def missing_value(cls, param_name: str, context: str = "") -> "ConfigurationError":
        """Create error for missing value."""
        msg = f"{param_name} is missing or empty"
        if context:
            msg += f": {context}"
        return cls(msg)

    @classmethod
    def duplicate_url(cls, url: str, first_name: str, second_name: str) -> "ConfigurationError":
        """Create error for two endpoints sharing one URL."""
        return cls(f"Endpoint URL {url!r} is configured more than once ({first_name!r} and {second_name!r})")
