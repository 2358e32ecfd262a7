"""Event construction for exceptions and HTTP transactions."""

from __future__ import annotations

import logging
import os
import platform
import socket
from collections.abc import Callable
from datetime import datetime
from typing import Any

import psutil

from allstack.events.models import (
    HTTP_REQUEST_MESSAGE,
    HTTP_REQUEST_TYPE,
    UNKNOWN_EXCEPTION_MESSAGE,
    ErrorLevel,
    ErrorSeverity,
    Event,
    RequestData,
)
from allstack.events.redaction import transform_body, transform_headers, transform_query_params
from allstack.events.severity import determine_level, determine_severity
from allstack.events.stacktrace import format_stack_trace, render_trace_text

logger = logging.getLogger(__name__)

EXCEPTION_USER_AGENT = "Python"
UNKNOWN_USER_AGENT = "unknown"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def host_name() -> str:
    return socket.gethostname()


def host_ip_address() -> str:
    name = host_name()
    try:
        return socket.gethostbyname(name)
    except OSError:
        return name


def memory_usage() -> int:
    return int(psutil.Process().memory_info().rss)


def create_contexts() -> dict[str, dict[str, Any]]:
    return {
        "runtime": {
            "name": "Python",
            "version": platform.python_version(),
        },
        "system": {
            "os": platform.system(),
            "uname": " ".join(part for part in platform.uname() if part),
        },
        "process": {
            "pid": os.getpid(),
        },
    }


def _qualified_name(exception: BaseException) -> str:
    cls = type(exception)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _origin(exception: BaseException) -> tuple[str, int]:
    tb = exception.__traceback__
    if tb is None:
        return "", 0
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_frame.f_code.co_filename, tb.tb_lineno


class EventBuilder:
    """Builds immutable events; all redaction happens here."""

    def __init__(
        self,
        *,
        environment: str,
        release: str = "1.0.0",
        component: str = "my-component",
        clock: Callable[[], datetime] = datetime.now,
        log: logging.Logger | None = None,
    ) -> None:
        self.environment = environment
        self.release = release
        self.component = component
        self._clock = clock
        self._log = log or logger

    def _common(self) -> dict[str, Any]:
        return {
            "environment": self.environment,
            "timestamp": format_timestamp(self._clock()),
            "contexts": create_contexts(),
            "release": self.release,
            "component": self.component,
            "memory_usage": memory_usage(),
            "cpu_usage": None,
        }

    def build_from_exception(
        self, exception: BaseException, *, trace_text: str | None = None
    ) -> Event:
        severity = determine_severity(exception)
        file, line = _origin(exception)
        raw_trace = trace_text
        if raw_trace is None:
            raw_trace = render_trace_text(exception.__traceback__)
        event = Event(
            error_message=str(exception) or UNKNOWN_EXCEPTION_MESSAGE,
            error_type=_qualified_name(exception),
            error_level=determine_level("error", severity),
            error_severity=severity,
            ip=host_ip_address(),
            user_agent=EXCEPTION_USER_AGENT,
            url="",
            additional_data={
                "file": file,
                "line": line,
                "trace": raw_trace,
                "hostname": host_name(),
            },
            stack_trace=format_stack_trace(exception, trace_text),
            response_time=0.0,
            **self._common(),
        )
        self._log.debug("AllStack Exception Payload", extra={"payload": event.to_payload()})
        return event

    def build_from_request(self, request: RequestData, response_time_ms: float = 0.0) -> Event:
        port = "" if request.port is None else str(request.port)
        event = Event(
            error_message=HTTP_REQUEST_MESSAGE,
            error_type=HTTP_REQUEST_TYPE,
            error_level=ErrorLevel.WARNING,
            error_severity=ErrorSeverity.LOW,
            ip=request.ip,
            user_agent=request.user_agent or UNKNOWN_USER_AGENT,
            url=request.url,
            additional_data={
                "headers": transform_headers(request.headers),
                "queryParams": transform_query_params(request.query_params),
                "body": transform_body(request.body),
                "method": request.method.upper(),
                "host": request.host,
                "protocol": request.scheme,
                "hostname": host_name(),
                "port": port,
            },
            stack_trace={},
            response_time=float(response_time_ms),
            **self._common(),
        )
        self._log.debug("AllStack Request Payload", extra={"payload": event.to_payload()})
        return event
