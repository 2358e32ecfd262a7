"""AllStack exception hierarchy.

These never cross a capture call: the client converts every failure into a
``False`` result plus a log record. They exist so internal layers can raise
and catch precisely.
"""


class AllStackError(Exception):
    """Base exception for all AllStack errors."""


class ConfigError(AllStackError):
    """Invalid or missing configuration."""


class DeliveryError(AllStackError):
    """A single POST to the collector failed."""

    def __init__(self, message: str = "", *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
