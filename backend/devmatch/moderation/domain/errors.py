"""Error taxonomy for the report moderation workflow."""

from __future__ import annotations

from typing import Optional


class ModerationError(Exception):
    """Base class for moderation workflow failures.

    ``code`` is the machine-readable identifier surfaced to the console.
    """

    code = "moderation_error"

    def __init__(self, message: Optional[str] = None, *, report_id: Optional[str] = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code
        self.report_id = report_id


class InvalidStateError(ModerationError):
    """The report is not in a state that accepts the requested action."""

    code = "invalid_report_state"


class InvalidActionError(ModerationError):
    code = "invalid_report_action"


class ReportNotFoundError(ModerationError):
    code = "report_not_found"


class ResolutionInFlightError(ModerationError):
    """A resolve call for the same report is already pending."""

    code = "resolution_in_flight"


class AuthorizationError(ModerationError):
    code = "admin_required"


class TransportError(ModerationError):
    """Network, timeout or server failure while talking to the report service."""

    code = "report_service_unavailable"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        report_id: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, report_id=report_id)
        self.status_code = status_code


class ResponseDecodeError(TransportError):
    """The report service answered with a payload outside the known schema."""

    code = "report_service_bad_response"


class InvalidFilterError(ValueError):
    pass
