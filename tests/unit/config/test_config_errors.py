import pytest

from src.monitord.config.errors import ConfigurationError


@pytest.mark.parametrize(
    ("factory", "args", "expected"),
    [
        (
            ConfigurationError.invalid_format,
            ("param", "value", "expected pattern"),
            "param has invalid format (received 'value'). Expected expected pattern",
        ),
        (
            ConfigurationError.invalid_format,
            ("param", 5),
            "param has invalid format (received 5)",
        ),
        (
            ConfigurationError.missing_value,
            ("param", "context"),
            "param is missing or empty: context",
        ),
        (
            ConfigurationError.missing_value,
            ("param",),
            "param is missing or empty",
        ),
        (
            ConfigurationError.duplicate_url,
            ("http://a.example", "first", "second"),
            "Endpoint URL 'http://a.example' is configured more than once ('first' and 'second')",
        ),
    ],
)
def test_factory_messages(factory, args, expected):
    error = factory(*args)

    assert isinstance(error, ConfigurationError)
    assert str(error) == expected
