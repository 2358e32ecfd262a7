"""Severity and level classification."""

from allstack.events.models import ErrorLevel, ErrorSeverity

# TypeError is the type-mismatch class; Warning covers warnings promoted to
# errors (``warnings.simplefilter("error")`` / ``-W error``).
HIGH_SEVERITY_TYPES: tuple[type[BaseException], ...] = (TypeError, Warning)


def determine_severity(exception: BaseException) -> ErrorSeverity:
    if isinstance(exception, HIGH_SEVERITY_TYPES):
        return ErrorSeverity.HIGH
    message = str(exception).lower()
    if "syntax" in message:
        return ErrorSeverity.CRITICAL
    if "timeout" in message or "network" in message:
        return ErrorSeverity.MEDIUM
    return ErrorSeverity.LOW


def determine_level(kind: str, severity: ErrorSeverity) -> ErrorLevel:
    if severity is ErrorSeverity.CRITICAL:
        return ErrorLevel.CRITICAL
    if kind == "error":
        return ErrorLevel.ERROR
    return ErrorLevel.WARNING
