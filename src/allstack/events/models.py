"""Event model definitions."""

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

HTTP_REQUEST_TYPE = "HTTPRequest"
UNKNOWN_EXCEPTION_MESSAGE = "Unknown Exception"
HTTP_REQUEST_MESSAGE = "HTTP Request Captured"


class ErrorSeverity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorLevel(StrEnum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True, slots=True)
class RequestData:
    """Primitives extracted from a host framework's request object."""

    method: str
    url: str
    ip: str = ""
    user_agent: str | None = None
    headers: Mapping[str, str | Sequence[str]] = field(default_factory=dict)
    query_params: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)
    host: str = ""
    scheme: str = "http"
    port: int | str | None = None


@dataclass(frozen=True, slots=True)
class Event:
    """One delivery-ready telemetry record.

    Attribute names are pythonic; ``to_payload`` produces the collector's
    camelCase wire shape.
    """

    error_message: str
    error_type: str
    error_level: ErrorLevel
    error_severity: ErrorSeverity
    environment: str
    timestamp: str
    ip: str = ""
    user_agent: str = ""
    url: str = ""
    additional_data: dict[str, Any] = field(default_factory=dict)
    stack_trace: dict[str, dict[str, Any]] = field(default_factory=dict)
    contexts: dict[str, dict[str, Any]] = field(default_factory=dict)
    release: str = ""
    component: str = ""
    transaction_id: str = ""
    fingerprint: str = ""
    root_cause: str = ""
    category: str = ""
    memory_usage: int = 0
    cpu_usage: float | None = None
    response_time: float = 0.0
    tags: tuple[str, ...] = ()

    @property
    def is_http_request(self) -> bool:
        return self.error_type == HTTP_REQUEST_TYPE

    def to_payload(self) -> dict[str, Any]:
        return {
            "errorMessage": self.error_message,
            "errorType": self.error_type,
            "errorLevel": str(self.error_level),
            "environment": self.environment,
            "ip": self.ip,
            "userAgent": self.user_agent,
            "url": self.url,
            "timestamp": self.timestamp,
            "additionalData": copy.deepcopy(self.additional_data),
            "stackTrace": copy.deepcopy(self.stack_trace),
            "contexts": copy.deepcopy(self.contexts),
            "release": self.release,
            "component": self.component,
            "transactionId": self.transaction_id,
            "fingerprint": self.fingerprint,
            "rootCause": self.root_cause,
            "category": self.category,
            "memoryUsage": self.memory_usage,
            "cpuUsage": self.cpu_usage,
            "responseTime": self.response_time,
            "tags": list(self.tags),
            "errorSeverity": str(self.error_severity),
        }
