"""Event construction, redaction, classification and validation."""

from allstack.events.builder import EventBuilder
from allstack.events.models import ErrorLevel, ErrorSeverity, Event, RequestData

__all__ = ["ErrorLevel", "ErrorSeverity", "Event", "EventBuilder", "RequestData"]
