"""Report entities and enumerations for the moderation console."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ReportType(str, Enum):
    POST = "POST"
    COMMENT = "COMMENT"
    USER = "USER"
    JOB = "JOB"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    # Reserved: no transition produces it, but the service may still return it.
    REVIEWED = "REVIEWED"
    RESOLVED = "RESOLVED"


class ReportAction(str, Enum):
    DISMISS = "DISMISS"
    WARN = "WARN"
    REMOVE = "REMOVE"
    BAN = "BAN"


class ReportReason(str, Enum):
    SPAM = "SPAM"
    HARASSMENT = "HARASSMENT"
    HATE_SPEECH = "HATE_SPEECH"
    INAPPROPRIATE = "INAPPROPRIATE"
    FAKE = "FAKE"
    COPYRIGHT = "COPYRIGHT"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        return REASON_LABELS[self]


REASON_LABELS: dict[ReportReason, str] = {
    ReportReason.SPAM: "Spam or misleading",
    ReportReason.HARASSMENT: "Harassment or bullying",
    ReportReason.HATE_SPEECH: "Hate speech or discrimination",
    ReportReason.INAPPROPRIATE: "Inappropriate content",
    ReportReason.FAKE: "Fake or fraudulent",
    ReportReason.COPYRIGHT: "Copyright violation",
    ReportReason.OTHER: "Other",
}


@dataclass(frozen=True, slots=True)
class UserRef:
    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AuthorRef:
    id: str
    username: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ContentSnapshot:
    """Read-only preview of the reported target captured by the service.

    The snapshot is not refreshed when the live target changes.
    """

    id: str
    content: Optional[str] = None
    title: Optional[str] = None
    username: Optional[str] = None
    author: Optional[AuthorRef] = None

    def preview(self) -> str:
        if self.content:
            return f'"{self.content}"'
        if self.title:
            return f"Job: {self.title}"
        if self.username:
            return f"User: @{self.username}"
        return ""


@dataclass(frozen=True, slots=True)
class Report:
    id: str
    type: ReportType
    reason: ReportReason
    status: ReportStatus
    reporter: UserRef
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    reported_user: Optional[UserRef] = None
    reported_content: Optional[ContentSnapshot] = None
    action: Optional[ReportAction] = None
    resolved_by: Optional[AuthorRef] = None
    resolved_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status is ReportStatus.PENDING

    @property
    def is_resolved(self) -> bool:
        return self.status is ReportStatus.RESOLVED

    def is_consistent(self) -> bool:
        """Check that the resolution fields are set exactly when resolved."""
        resolution_fields = (self.action, self.resolved_by, self.resolved_at)
        if self.is_resolved:
            return all(value is not None for value in resolution_fields)
        return all(value is None for value in resolution_fields)

