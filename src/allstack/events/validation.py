"""Required-field checks run before an event leaves the process."""

import logging
from collections.abc import Mapping
from typing import Any

from allstack.events.models import HTTP_REQUEST_TYPE

logger = logging.getLogger(__name__)

REQUEST_REQUIRED_FIELDS = ("errorMessage", "errorType", "environment", "timestamp", "url")
EXCEPTION_REQUIRED_FIELDS = ("errorMessage", "errorType", "errorLevel", "environment", "timestamp")


def required_fields(payload: Mapping[str, Any]) -> tuple[str, ...] | None:
    if payload.get("errorType") == HTTP_REQUEST_TYPE:
        return REQUEST_REQUIRED_FIELDS
    if payload.get("errorMessage") is not None and payload.get("errorType") is not None:
        return EXCEPTION_REQUIRED_FIELDS
    return None


def validate_payload(payload: Mapping[str, Any], *, log: logging.Logger | None = None) -> bool:
    """Return True when every required field is present.

    Only ``None`` and ``""`` count as missing; ``0`` and ``False`` are values.
    """
    log = log or logger
    fields = required_fields(payload)
    if fields is None:
        log.warning("Unknown payload type", extra={"payload": dict(payload)})
        return False

    for name in fields:
        value = payload.get(name)
        if value is None or value == "":
            log.warning(
                "Missing required field: %s",
                name,
                extra={"field": name, "payload": dict(payload)},
            )
            return False
    return True
