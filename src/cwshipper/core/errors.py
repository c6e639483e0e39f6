"""
Error hierarchy for cwshipper.

Every error raised by the shipping core derives from ``CwShipperError`` and
carries an ``ErrorCategory`` so callers (and the outer retry layer) can branch
on an explicit kind instead of matching exception classes one by one.

Remote failures are normalized into ``RemoteServiceError`` with a typed
``RemoteErrorCode``; ``conflict_action`` decides what the append protocol does
with each code.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = [
    "ConfigurationError",
    "ConflictAction",
    "CwShipperError",
    "ErrorCategory",
    "ErrorSeverity",
    "IngestCycleError",
    "ListingExhaustedError",
    "RemoteErrorCode",
    "RemoteServiceError",
    "SequenceTokenConflictError",
    "conflict_action",
]


class ErrorCategory(str, Enum):
    """Broad classification used for diagnostics and retry decisions."""

    CONFIG = "config"
    REMOTE = "remote"
    CONFLICT = "conflict"
    DESTINATION = "destination"
    CYCLE = "cycle"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CwShipperError(Exception):
    """Base error carrying category, severity and optional context."""

    category: ErrorCategory = ErrorCategory.REMOTE
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context: dict[str, Any] = dict(context)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error.type": type(self).__name__,
            "error.message": self.message,
            "error.category": self.category.value,
            "error.severity": self.severity.value,
            "error.retryable": self.retryable,
        }
        if self.cause is not None:
            data["error.cause"] = type(self.cause).__name__
        if self.context:
            data["error.context"] = dict(self.context)
        return data


class ConfigurationError(CwShipperError):
    """Invalid or ambiguous configuration; fatal at startup."""

    category = ErrorCategory.CONFIG
    severity = ErrorSeverity.CRITICAL


class RemoteErrorCode(str, Enum):
    """Typed outcome codes for failed remote calls."""

    ALREADY_EXISTS = "ResourceAlreadyExistsException"
    ALREADY_ACCEPTED = "DataAlreadyAcceptedException"
    INVALID_SEQUENCE_TOKEN = "InvalidSequenceTokenException"
    OTHER = "Other"

    @classmethod
    def from_code(cls, code: str | None) -> RemoteErrorCode:
        for member in cls:
            if member.value == code:
                return member
        return cls.OTHER


class RemoteServiceError(CwShipperError):
    """A remote call failed; ``code`` says how."""

    category = ErrorCategory.REMOTE

    def __init__(
        self,
        message: str,
        *,
        code: RemoteErrorCode = RemoteErrorCode.OTHER,
        operation: str | None = None,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message, cause=cause, operation=operation, **context)
        self.code = code
        self.operation = operation


class SequenceTokenConflictError(RemoteServiceError):
    """The supplied sequence token was stale; the destination must be redelivered."""

    category = ErrorCategory.CONFLICT
    retryable = True

    def __init__(
        self,
        group: str,
        stream: str,
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"Invalid sequence token for '{group}/{stream}'",
            code=RemoteErrorCode.INVALID_SEQUENCE_TOKEN,
            operation="put_events",
            cause=cause,
            group=group,
            stream=stream,
        )
        self.group = group
        self.stream = stream


class ListingExhaustedError(CwShipperError):
    """A paginated search hit the page cap while more pages were advertised."""

    category = ErrorCategory.DESTINATION
    severity = ErrorSeverity.HIGH

    def __init__(self, resource: str, pages: int, **context: Any) -> None:
        super().__init__(
            f"Gave up searching for {resource} after {pages} pages",
            pages=pages,
            **context,
        )
        self.resource = resource
        self.pages = pages


class IngestCycleError(CwShipperError):
    """One or more destinations failed during a cycle.

    Carries the per-destination failures; ``retryable`` is true when any
    failure asks for redelivery (a sequence token conflict).
    """

    category = ErrorCategory.CYCLE

    def __init__(self, failures: dict[tuple[str, str], BaseException]) -> None:
        names = ", ".join(f"{g}/{s}" for g, s in failures)
        super().__init__(
            f"{len(failures)} destination(s) failed: {names}",
            destinations=[list(k) for k in failures],
        )
        self.failures = dict(failures)
        self.retryable = any(
            getattr(exc, "retryable", False) for exc in self.failures.values()
        )


class ConflictAction(str, Enum):
    """What the append protocol does with a failed append."""

    SWALLOW_AND_RESET = "swallow_and_reset"
    RESET_AND_RAISE = "reset_and_raise"
    RAISE = "raise"


_CONFLICT_ACTIONS: dict[RemoteErrorCode, ConflictAction] = {
    RemoteErrorCode.ALREADY_ACCEPTED: ConflictAction.SWALLOW_AND_RESET,
    RemoteErrorCode.INVALID_SEQUENCE_TOKEN: ConflictAction.RESET_AND_RAISE,
}


def conflict_action(code: RemoteErrorCode) -> ConflictAction:
    return _CONFLICT_ACTIONS.get(code, ConflictAction.RAISE)
