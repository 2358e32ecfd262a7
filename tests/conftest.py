import os

import httpx
import pytest

from allstack.config import Settings, get_settings
from allstack.ratelimit import get_rate_limiter


@pytest.fixture(autouse=True)
def test_env():
    os.environ["ALLSTACK_API_KEY"] = "test-api-key"
    os.environ["ALLSTACK_ENVIRONMENT"] = "testing"
    os.environ["ALLSTACK_BASE_URL"] = "http://collector.local/api/client"
    get_settings.cache_clear()
    get_rate_limiter().reset()
    yield
    get_settings.cache_clear()
    get_rate_limiter().reset()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_key="test-api-key",
        environment="testing",
        base_url="http://collector.local/api/client",
    )


class Collector:
    """Records POSTs and answers with a scripted sequence of outcomes."""

    def __init__(self, outcomes: list[object] | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else 201
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(int(outcome), json={"ok": True})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def collector() -> Collector:
    return Collector()


@pytest.fixture
def make_collector():
    return Collector
