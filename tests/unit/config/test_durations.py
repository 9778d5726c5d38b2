import pytest

from src.monitord.config.durations import format_duration, parse_duration
from src.monitord.config.errors import ConfigurationError


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (30, 30.0),
        (2.5, 2.5),
        ("45", 45.0),
        ("30s", 30.0),
        ("1m30s", 90.0),
        ("2h", 7200.0),
        ("500ms", 0.5),
        ("1.5h", 5400.0),
        ("250us", 0.00025),
        ("1h2m3s", 3723.0),
        (" 10s ", 10.0),
        ("-5s", -5.0),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    "value",
    [True, None, [], "", "soon", "10x", "s10", "1m30", "nan", "inf", "-inf", "1e999", float("nan"), float("inf"), 10**400],
)
def test_parse_duration_rejects(value):
    with pytest.raises(ConfigurationError):
        parse_duration(value, "monitor.endpoints[0].interval")


def test_error_names_the_field():
    with pytest.raises(ConfigurationError, match=r"monitor.endpoints\[0\].interval"):
        parse_duration("often", "monitor.endpoints[0].interval")


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0s"), (0.5, "500ms"), (30, "30s"), (90, "1m30s"), (3600, "1h"), (3723, "1h2m3s"), (2.5, "2.5s")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_then_parse_preserves_value():
    assert parse_duration(format_duration(5400)) == 5400
