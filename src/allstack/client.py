"""Capture facade: throttle, build, validate, deliver.

Nothing raised inside a capture call reaches the caller. Every path ends in a
``CaptureOutcome`` and a log record; the public methods reduce that to a bool.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
from functools import lru_cache

import httpx

from allstack.config import Settings, get_settings, validate_settings
from allstack.events.builder import EventBuilder
from allstack.events.models import Event, RequestData
from allstack.events.validation import validate_payload
from allstack.ratelimit import DEFAULT_KEY, RateLimiter, get_rate_limiter
from allstack.transport import EXCEPTION_ENDPOINT, REQUEST_ENDPOINT, DeliveryClient

logger = logging.getLogger(__name__)


class CaptureOutcome(StrEnum):
    SENT = "sent"
    THROTTLED = "throttled"
    INVALID = "invalid"
    DELIVERY_FAILED = "delivery_failed"
    INTERNAL_ERROR = "internal_error"


class AllStackClient:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.BaseTransport | None = None,
        log: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        validate_settings(self.settings)
        self._log = log or logger
        self._rate_limiter = rate_limiter or get_rate_limiter()
        self._builder = EventBuilder(
            environment=self.settings.environment,
            release=self.settings.release,
            component=self.settings.component,
            clock=clock,
            log=self._log,
        )
        self._delivery = DeliveryClient(
            self.settings.base_url,
            self.settings.api_key,
            timeout_seconds=self.settings.timeout_seconds,
            connect_timeout_seconds=self.settings.connect_timeout_seconds,
            max_attempts=self.settings.max_attempts,
            retry_delay_seconds=self.settings.retry_delay_seconds,
            transport=transport,
            sleep=sleep,
            log=self._log,
        )

    def _throttled(self) -> bool:
        return not self._rate_limiter.allow(DEFAULT_KEY, self.settings.rate_limit_per_minute)

    def _capture(self, kind: str, build: Callable[[], Event]) -> CaptureOutcome:
        outcome = self._attempt(kind, build)
        self._log.debug("AllStack capture finished", extra={"kind": kind, "outcome": str(outcome)})
        return outcome

    def _attempt(self, kind: str, build: Callable[[], Event]) -> CaptureOutcome:
        try:
            if self._throttled():
                self._log.warning("AllStack rate limit exceeded", extra={"kind": kind})
                return CaptureOutcome.THROTTLED
            event = build()
            if not validate_payload(event.to_payload(), log=self._log):
                return CaptureOutcome.INVALID
            endpoint = REQUEST_ENDPOINT if event.is_http_request else EXCEPTION_ENDPOINT
            if not self._delivery.send(endpoint, event):
                return CaptureOutcome.DELIVERY_FAILED
        except Exception as exc:
            self._log.error(
                "Failed to send %s to AllStack: %s",
                kind,
                exc,
                extra={"kind": kind, "error_type": type(exc).__name__},
            )
            return CaptureOutcome.INTERNAL_ERROR
        return CaptureOutcome.SENT

    def capture_exception(
        self, exception: BaseException, *, trace_text: str | None = None
    ) -> bool:
        """Report ``exception``; ``trace_text`` overrides the live traceback."""
        outcome = self._capture(
            "exception",
            lambda: self._builder.build_from_exception(exception, trace_text=trace_text),
        )
        return outcome is CaptureOutcome.SENT

    def capture_request(self, request: RequestData, response_time_ms: float = 0.0) -> bool:
        outcome = self._capture(
            "request",
            lambda: self._builder.build_from_request(request, response_time_ms),
        )
        return outcome is CaptureOutcome.SENT

    def close(self) -> None:
        self._delivery.close()

    def __enter__(self) -> AllStackClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@lru_cache(maxsize=1)
def get_client() -> AllStackClient:
    return AllStackClient(get_settings())
