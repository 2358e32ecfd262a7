"""AllStack telemetry client: exception and HTTP transaction capture."""

from allstack.client import AllStackClient, CaptureOutcome, get_client
from allstack.config import Settings, get_settings
from allstack.events.models import Event, RequestData
from allstack.ratelimit import RateLimiter

__all__ = [
    "AllStackClient",
    "CaptureOutcome",
    "Event",
    "RateLimiter",
    "RequestData",
    "Settings",
    "get_client",
    "get_settings",
]
