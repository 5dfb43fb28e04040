"""Wire schemas for the report service's JSON bodies."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from devmatch.moderation.domain.errors import ResponseDecodeError
from devmatch.moderation.domain.models import (
    AuthorRef,
    ContentSnapshot,
    Report,
    ReportAction,
    ReportReason,
    ReportStatus,
    ReportType,
    UserRef,
)
from devmatch.moderation.domain.pagination import Pagination
from devmatch.moderation.domain.report_service import ReportPage


def _alias(*names: str) -> Any:
    return AliasChoices(*names)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AuthorIn(_WireModel):
    id: str = Field(validation_alias=_alias("_id", "id"))
    username: str | None = None

    def to_domain(self) -> AuthorRef:
        return AuthorRef(id=self.id, username=self.username)


class UserRefIn(_WireModel):
    id: str = Field(validation_alias=_alias("_id", "id"))
    username: str | None = None
    email: str | None = None
    avatar: str | None = None
    role: str | None = None

    def to_domain(self) -> UserRef:
        return UserRef(
            id=self.id,
            username=self.username,
            email=self.email,
            avatar=self.avatar,
            role=self.role,
        )


class ContentIn(_WireModel):
    id: str = Field(validation_alias=_alias("_id", "id"))
    content: str | None = None
    title: str | None = None
    username: str | None = None
    author: AuthorIn | None = None

    def to_domain(self) -> ContentSnapshot:
        return ContentSnapshot(
            id=self.id,
            content=self.content,
            title=self.title,
            username=self.username,
            author=self.author.to_domain() if self.author else None,
        )


class ReportIn(_WireModel):
    id: str = Field(validation_alias=_alias("_id", "id"))
    type: ReportType
    reason: ReportReason
    description: str | None = None
    status: ReportStatus
    reporter: UserRefIn
    reported_user: UserRefIn | None = Field(default=None, validation_alias=_alias("reportedUser", "reported_user"))
    reported_content: ContentIn | None = Field(
        default=None, validation_alias=_alias("reportedContent", "reported_content")
    )
    action: ReportAction | None = None
    resolved_by: AuthorIn | None = Field(default=None, validation_alias=_alias("resolvedBy", "resolved_by"))
    resolved_at: datetime | None = Field(default=None, validation_alias=_alias("resolvedAt", "resolved_at"))
    created_at: datetime = Field(validation_alias=_alias("createdAt", "created_at"))
    updated_at: datetime = Field(validation_alias=_alias("updatedAt", "updated_at"))

    def to_domain(self) -> Report:
        return Report(
            id=self.id,
            type=self.type,
            reason=self.reason,
            status=self.status,
            reporter=self.reporter.to_domain(),
            created_at=self.created_at,
            updated_at=self.updated_at,
            description=self.description,
            reported_user=self.reported_user.to_domain() if self.reported_user else None,
            reported_content=self.reported_content.to_domain() if self.reported_content else None,
            action=self.action,
            resolved_by=self.resolved_by.to_domain() if self.resolved_by else None,
            resolved_at=self.resolved_at,
        )


class PaginationIn(_WireModel):
    current_page: int = Field(validation_alias=_alias("currentPage", "current_page"), ge=1)
    total_pages: int = Field(validation_alias=_alias("totalPages", "total_pages"), ge=0)
    total_items: int = Field(validation_alias=_alias("totalItems", "total_items"), ge=0)
    has_next_page: bool = Field(validation_alias=_alias("hasNextPage", "has_next_page"))
    has_prev_page: bool = Field(validation_alias=_alias("hasPrevPage", "has_prev_page"))

    def to_domain(self) -> Pagination:
        return Pagination(
            current_page=self.current_page,
            total_pages=self.total_pages,
            total_items=self.total_items,
            has_next_page=self.has_next_page,
            has_prev_page=self.has_prev_page,
        )


class ReportPageIn(_WireModel):
    reports: list[ReportIn]
    pagination: PaginationIn

    def to_domain(self) -> ReportPage:
        return ReportPage(
            reports=tuple(item.to_domain() for item in self.reports),
            pagination=self.pagination.to_domain(),
        )


def decode_report(payload: dict[str, Any]) -> Report:
    try:
        return ReportIn.model_validate(payload).to_domain()
    except ValidationError as exc:
        raise ResponseDecodeError(f"invalid report payload: {exc.error_count()} errors") from exc


def decode_page(payload: dict[str, Any]) -> ReportPage:
    try:
        return ReportPageIn.model_validate(payload).to_domain()
    except ValidationError as exc:
        raise ResponseDecodeError(f"invalid report page payload: {exc.error_count()} errors") from exc
