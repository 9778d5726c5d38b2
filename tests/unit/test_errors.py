import pytest

from src.monitord.errors import (
    MonitordError,
    PersistenceError,
    ProbeTransportError,
    ReloadError,
    ShutdownTimeoutError,
    StartupError,
)


@pytest.mark.parametrize("error_class", [StartupError, ProbeTransportError, PersistenceError, ReloadError, ShutdownTimeoutError])
def test_default_message_is_class_docstring(error_class):
    error = error_class()

    assert isinstance(error, MonitordError)
    assert str(error) == error_class.__doc__


def test_keyword_arguments_become_attributes():
    error = PersistenceError("write failed", backend="sqlite", url="http://a.example")

    assert str(error) == "write failed"
    assert error.backend == "sqlite"
    assert error.url == "http://a.example"
