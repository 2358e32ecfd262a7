"""HTTP delivery to the collector with bounded fixed-delay retry."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from allstack.errors import DeliveryError
from allstack.events.models import Event

logger = logging.getLogger(__name__)

EXCEPTION_ENDPOINT = "/exception"
REQUEST_ENDPOINT = "/http-request-transactions"


class DeliveryClient:
    """Owns one pooled ``httpx.Client`` shared by every capture in the process."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout_seconds: float = 5.0,
        connect_timeout_seconds: float = 5.0,
        max_attempts: int = 3,
        retry_delay_seconds: float = 1.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        log: logging.Logger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay_seconds = max(0.0, float(retry_delay_seconds))
        self._api_key = api_key
        self._sleep = sleep
        self._log = log or logger
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=connect_timeout_seconds),
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _post(self, endpoint: str, payload: Mapping[str, Any]) -> httpx.Response:
        try:
            response = self._client.post(
                f"{self.base_url}{endpoint}", json=payload, headers=self._headers()
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DeliveryError(
                f"collector returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise DeliveryError(f"{type(exc).__name__}: {exc}") from exc
        return response

    def send(self, endpoint: str, event: Event | Mapping[str, Any]) -> bool:
        payload = event.to_payload() if isinstance(event, Event) else dict(event)
        self._log.debug(
            "Sending payload to AllStack",
            extra={"endpoint": endpoint, "payload": payload},
        )

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self._post(endpoint, payload)
            except DeliveryError as exc:
                self._log.error(
                    "Failed to send to AllStack",
                    extra={
                        "endpoint": endpoint,
                        "attempt": attempt,
                        "error": str(exc),
                        "status_code": exc.status_code,
                    },
                )
                if attempt == self.max_attempts:
                    self._log.error("Failed after %d attempts: %s", self.max_attempts, exc)
                    return False
                self._sleep(self.retry_delay_seconds)
                continue

            self._log.info(
                "Successfully sent to AllStack",
                extra={"endpoint": endpoint, "status": response.status_code},
            )
            return True
        return False

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> DeliveryClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
