"""Redaction and type coercion for untyped request data."""

import logging
import math
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
SENSITIVE_KEY_PARTS = ("password", "token", "secret", "credit_card")

_INT_RE = re.compile(r"^\s*[+-]?\d+\s*$")
_FLOAT_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_sensitive_key(key: object) -> bool:
    lowered = str(key).lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def coerce_scalar(value: Any) -> Any:
    """Turn ``"true"``/``"false"`` and numeric strings into real values."""
    if not isinstance(value, str):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        number = float(value)
        # overflowing exponents would serialise as Infinity
        return number if math.isfinite(number) else value
    return value


def _transform_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return redact_and_coerce(value)
    if isinstance(value, list | tuple):
        return [redact_and_coerce(item) if isinstance(item, Mapping) else item for item in value]
    return coerce_scalar(value)


def redact_and_coerce(data: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively redact sensitive keys and coerce string scalars.

    A sensitive key's value is replaced wholesale, whatever its type. Nested
    mappings (including mappings inside lists) get the same treatment; scalar
    list items are left untouched.
    """
    return {
        key: REDACTED if is_sensitive_key(key) else _transform_value(value)
        for key, value in data.items()
    }


def transform_headers(headers: Mapping[str, Any]) -> dict[str, Any]:
    transformed: dict[str, Any] = {}
    for key, values in headers.items():
        if isinstance(values, list | tuple):
            transformed[str(key).lower()] = ", ".join(str(item) for item in values)
        else:
            transformed[str(key).lower()] = values
    logger.debug("Transformed headers", extra={"headers": transformed})
    return transformed


def transform_query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """One level only: lists are joined, scalars redacted or coerced."""
    transformed: dict[str, Any] = {}
    for key, value in params.items():
        if is_sensitive_key(key):
            transformed[key] = REDACTED
        elif isinstance(value, list | tuple):
            transformed[key] = ",".join(str(item) for item in value)
        else:
            transformed[key] = coerce_scalar(value)
    logger.debug("Transformed query params", extra={"params": transformed})
    return transformed


def transform_body(body: Mapping[str, Any]) -> dict[str, Any]:
    return redact_and_coerce(body)
