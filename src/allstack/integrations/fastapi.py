"""FastAPI / Starlette middleware that reports requests and unhandled errors."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any
from urllib.parse import parse_qsl

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from allstack.client import AllStackClient, get_client
from allstack.errors import AllStackError
from allstack.events.models import RequestData

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _multi_dict(items: list[tuple[str, str]]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in items:
        if key in out:
            existing = out[key]
            out[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            out[key] = value
    return out


def _parse_body(content_type: str, raw: bytes) -> dict[str, Any]:
    if not raw:
        return {}
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return {}
        return decoded if isinstance(decoded, dict) else {}
    if media_type == "application/x-www-form-urlencoded":
        return _multi_dict(parse_qsl(raw.decode("utf-8", "replace"), keep_blank_values=True))
    return {}


def request_data_from_starlette(request: Request, body: bytes = b"") -> RequestData:
    headers: dict[str, list[str]] = {}
    for key, value in request.headers.items():
        headers.setdefault(key, []).append(value)
    port = request.url.port or _DEFAULT_PORTS.get(request.url.scheme)
    return RequestData(
        method=request.method,
        url=str(request.url),
        ip=request.client.host if request.client else "",
        user_agent=request.headers.get("user-agent"),
        headers=headers,
        query_params=_multi_dict(request.query_params.multi_items()),
        body=_parse_body(request.headers.get("content-type", ""), body),
        host=request.url.hostname or "",
        scheme=request.url.scheme,
        port=port,
    )


class AllStackMiddleware(BaseHTTPMiddleware):
    """Capture every request and any exception the downstream app raises.

    Capture calls block, so they run in a worker thread.
    """

    def __init__(
        self,
        app: ASGIApp,
        client: AllStackClient | None = None,
        *,
        capture_requests: bool = True,
        capture_exceptions: bool = True,
    ) -> None:
        super().__init__(app)
        if client is None:
            try:
                client = get_client()
            except AllStackError as exc:
                logger.error("AllStack capture disabled: %s", exc)
        self.client = client
        self.capture_requests = capture_requests
        self.capture_exceptions = capture_exceptions

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self.client is None:
            return await call_next(request)
        started = time.perf_counter()
        body = await self._read_body(request) if self.capture_requests else b""
        try:
            response = await call_next(request)
        except Exception as exc:
            if self.capture_exceptions:
                await asyncio.to_thread(self.client.capture_exception, exc)
            raise
        finally:
            if self.capture_requests:
                elapsed_ms = (time.perf_counter() - started) * 1000.0
                await self._report_request(request, body, elapsed_ms)
        return response

    async def _read_body(self, request: Request) -> bytes:
        try:
            return await request.body()
        except Exception as exc:
            logger.warning("Failed to read request body for AllStack: %s", exc)
            return b""

    async def _report_request(self, request: Request, body: bytes, elapsed_ms: float) -> None:
        try:
            data = request_data_from_starlette(request, body)
        except Exception as exc:
            logger.error("Failed to extract request for AllStack: %s", exc)
            return
        sent = await asyncio.to_thread(self.client.capture_request, data, elapsed_ms)
        if not sent:
            logger.debug("Request capture skipped", extra={"path": request.url.path})
