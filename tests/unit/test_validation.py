import logging

import pytest

from allstack.events.validation import validate_payload


def _exception_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "errorMessage": "boom",
        "errorType": "ValueError",
        "errorLevel": "ERROR",
        "environment": "testing",
        "timestamp": "2024-12-21T21:54:16",
        "url": "",
    }
    payload.update(overrides)
    return payload


def _request_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "errorMessage": "HTTP Request Captured",
        "errorType": "HTTPRequest",
        "errorLevel": "WARNING",
        "environment": "testing",
        "timestamp": "2024-12-21T21:54:16",
        "url": "http://shop.local/orders?page=2",
    }
    payload.update(overrides)
    return payload


def test_valid_exception_payload() -> None:
    assert validate_payload(_exception_payload()) is True


def test_exception_payload_does_not_require_url() -> None:
    assert validate_payload(_exception_payload(url="")) is True


def test_request_payload_requires_url(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    assert validate_payload(_request_payload(url="")) is False
    assert "Missing required field: url" in caplog.text


def test_request_payload_does_not_require_level() -> None:
    assert validate_payload(_request_payload(errorLevel=None)) is True


@pytest.mark.parametrize("field", ["errorLevel", "environment", "timestamp"])
@pytest.mark.parametrize("missing", [None, ""])
def test_missing_exception_fields_fail(field: str, missing: object) -> None:
    assert validate_payload(_exception_payload(**{field: missing})) is False


@pytest.mark.parametrize("value", [0, False, 0.0])
def test_zero_and_false_are_present(value: object) -> None:
    assert validate_payload(_exception_payload(environment=value, errorLevel=value)) is True
    assert validate_payload(_request_payload(url=value, timestamp=value)) is True


def test_unknown_payload_shape_is_rejected(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    assert validate_payload({"errorMessage": "boom"}) is False
    assert validate_payload({}) is False
    assert "Unknown payload type" in caplog.text


def test_empty_message_fails_even_when_present() -> None:
    assert validate_payload(_exception_payload(errorMessage="")) is False


def test_uses_injected_logger(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    validate_payload(_exception_payload(timestamp=None), log=logging.getLogger("host.telemetry"))
    assert [record.name for record in caplog.records] == ["host.telemetry"]
    assert caplog.records[0].field == "timestamp"
