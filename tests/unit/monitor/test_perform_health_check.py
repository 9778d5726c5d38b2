from datetime import datetime, timezone

import pytest

from src.monitord.monitor.health_check import perform_health_check
from src.monitord.monitor.types import CheckStatus


@pytest.mark.asyncio
async def test_status_200_is_up(scripted_prober, endpoint_factory):
    endpoint = endpoint_factory("http://a.example", tags=("prod", "api"))
    before = datetime.now(timezone.utc)

    check = await perform_health_check(endpoint, scripted_prober)

    assert check.status is CheckStatus.UP
    assert check.status_code == 200
    assert check.response_time_ms == 3
    assert check.error_message is None
    assert check.tags == ("prod", "api")
    assert check.name == endpoint.name
    assert before <= check.timestamp <= datetime.now(timezone.utc)
    assert scripted_prober.calls[0][:2] == ("http://a.example", endpoint.timeout)


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [201, 204, 301, 404, 500, 503])
async def test_other_status_codes_are_degraded(scripted_prober, endpoint_factory, status_code):
    scripted_prober.default_status = status_code

    check = await perform_health_check(endpoint_factory(), scripted_prober)

    assert check.status is CheckStatus.DEGRADED
    assert check.status_code == status_code
    assert check.error_message is None


@pytest.mark.asyncio
async def test_transport_error_is_error(scripted_prober, endpoint_factory, transport_error, caplog):
    scripted_prober.outcomes["http://a.example"] = transport_error

    check = await perform_health_check(endpoint_factory("http://a.example"), scripted_prober)

    assert check.status is CheckStatus.ERROR
    assert check.status_code is None
    assert check.response_time_ms is None
    assert "Cannot connect to host" in check.error_message
    assert "Error checking endpoint http://a.example" in caplog.text


@pytest.mark.asyncio
async def test_programming_errors_propagate(scripted_prober, endpoint_factory):
    scripted_prober.outcomes["http://a.example"] = KeyError("bug")

    with pytest.raises(KeyError):
        await perform_health_check(endpoint_factory("http://a.example"), scripted_prober)


def test_to_record_flattens_for_storage(endpoint_factory):
    from src.monitord.monitor.types import HealthCheck

    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    check = HealthCheck(
        name="api",
        url="http://a.example",
        status=CheckStatus.DEGRADED,
        timestamp=stamp,
        status_code=502,
        response_time_ms=41,
        tags=("prod", "edge"),
    )

    assert check.to_record() == {
        "name": "api",
        "url": "http://a.example",
        "status": "DEGRADED",
        "status_code": 502,
        "response_time": 41,
        "timestamp": "2024-05-01T12:00:00+00:00",
        "error": None,
        "tags": "prod,edge",
    }
