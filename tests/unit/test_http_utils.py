from types import SimpleNamespace

import pytest

from src.monitord import http_utils


def test_is_aiohttp_session_open_returns_false_for_none() -> None:
    assert not http_utils.is_aiohttp_session_open(None)


def test_is_aiohttp_session_open_returns_false_when_closed_attribute_true() -> None:
    session = SimpleNamespace(closed=True)
    assert not http_utils.is_aiohttp_session_open(session)


def test_is_aiohttp_session_open_returns_false_when_closed_attribute_missing() -> None:
    session = SimpleNamespace()
    assert not http_utils.is_aiohttp_session_open(session)


def test_is_aiohttp_session_open_returns_true_when_closed_attribute_false() -> None:
    session = SimpleNamespace(closed=False)
    assert http_utils.is_aiohttp_session_open(session)


@pytest.mark.parametrize("url", ["http://a.example", "HTTPS://a.example/health?x=1", "http://10.0.0.1:8080/"])
def test_ensure_http_url_accepts_http_schemes(url) -> None:
    assert http_utils.ensure_http_url(url) == url


@pytest.mark.parametrize(
    ("url", "message"),
    [
        ("ftp://a.example", "Unsupported URL scheme"),
        ("a.example/health", "Unsupported URL scheme"),
        ("http://", "missing network location"),
    ],
)
def test_ensure_http_url_rejects(url, message) -> None:
    with pytest.raises(ValueError, match=message):
        http_utils.ensure_http_url(url)
