import json
import logging

import httpx
import pytest

from allstack.transport import EXCEPTION_ENDPOINT, REQUEST_ENDPOINT, DeliveryClient

BASE_URL = "http://collector.local/api/client"


def _client(transport: httpx.BaseTransport, sleeps: list[float], **kwargs: object) -> DeliveryClient:
    return DeliveryClient(
        BASE_URL,
        "secret-key",
        transport=transport,
        sleep=sleeps.append,
        **kwargs,
    )


def test_send_posts_json_with_api_headers(make_collector) -> None:
    collector = make_collector([201])
    sleeps: list[float] = []
    with _client(collector.transport, sleeps) as client:
        assert client.send(EXCEPTION_ENDPOINT, {"errorMessage": "boom", "count": 0}) is True

    [request] = collector.requests
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/exception"
    assert request.headers["x-api-key"] == "secret-key"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["accept"] == "application/json"
    assert json.loads(request.content) == {"errorMessage": "boom", "count": 0}
    assert sleeps == []


def test_recovers_on_third_attempt(make_collector) -> None:
    collector = make_collector([httpx.ConnectError("refused"), 503, 200])
    sleeps: list[float] = []
    client = _client(collector.transport, sleeps)
    assert client.send(REQUEST_ENDPOINT, {"errorType": "HTTPRequest"}) is True
    assert len(collector.requests) == 3
    assert sleeps == [1.0, 1.0]
    assert str(collector.requests[-1].url) == f"{BASE_URL}/http-request-transactions"


def test_gives_up_after_max_attempts(make_collector, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)
    collector = make_collector([500, 500, 500, 500])
    sleeps: list[float] = []
    client = _client(collector.transport, sleeps)
    assert client.send(EXCEPTION_ENDPOINT, {"errorMessage": "boom"}) is False
    assert len(collector.requests) == 3
    assert sleeps == [1.0, 1.0]
    attempts = [record.attempt for record in caplog.records if hasattr(record, "attempt")]
    assert attempts == [1, 2, 3]
    assert "Failed after 3 attempts" in caplog.text


def test_client_errors_are_retried_like_server_errors(make_collector) -> None:
    collector = make_collector([401, 422, 201])
    client = _client(collector.transport, [])
    assert client.send(EXCEPTION_ENDPOINT, {}) is True
    assert len(collector.requests) == 3


def test_timeouts_are_retried(make_collector) -> None:
    collector = make_collector([httpx.ReadTimeout("slow"), 202])
    client = _client(collector.transport, [])
    assert client.send(EXCEPTION_ENDPOINT, {}) is True
    assert len(collector.requests) == 2


def test_configurable_attempts_and_delay(make_collector) -> None:
    collector = make_collector([500] * 10)
    sleeps: list[float] = []
    client = _client(collector.transport, sleeps, max_attempts=5, retry_delay_seconds=0.25)
    assert client.send(EXCEPTION_ENDPOINT, {}) is False
    assert len(collector.requests) == 5
    assert sleeps == [0.25] * 4


def test_single_attempt_never_sleeps(make_collector) -> None:
    collector = make_collector([500])
    sleeps: list[float] = []
    client = _client(collector.transport, sleeps, max_attempts=1)
    assert client.send(EXCEPTION_ENDPOINT, {}) is False
    assert sleeps == []


def test_base_url_trailing_slash_is_normalized(make_collector) -> None:
    collector = make_collector([200])
    client = DeliveryClient(f"{BASE_URL}/", "k", transport=collector.transport, sleep=lambda _: None)
    client.send(EXCEPTION_ENDPOINT, {})
    assert str(collector.requests[0].url) == f"{BASE_URL}/exception"
