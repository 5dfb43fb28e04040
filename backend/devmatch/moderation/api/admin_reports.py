"""Admin console endpoints for reviewing and resolving reports."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from devmatch.infra.auth import AuthenticatedUser, get_current_user
from devmatch.moderation.domain import engine
from devmatch.moderation.domain.container import get_report_store
from devmatch.moderation.domain.filters import ReportFilterSet
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
from devmatch.moderation.domain.rbac import AdminContext, resolve_admin_context
from devmatch.moderation.domain.store import ReportStore

router = APIRouter(prefix="/api/admin/v1/reports", tags=["moderation-reports"])


class UserOut(BaseModel):
    id: str
    username: str | None = None
    email: str | None = None
    avatar: str | None = None
    role: str | None = None

    @classmethod
    def from_ref(cls, ref: UserRef) -> "UserOut":
        return cls(id=ref.id, username=ref.username, email=ref.email, avatar=ref.avatar, role=ref.role)


class AuthorOut(BaseModel):
    id: str
    username: str | None = None

    @classmethod
    def from_ref(cls, ref: AuthorRef) -> "AuthorOut":
        return cls(id=ref.id, username=ref.username)


class ContentOut(BaseModel):
    id: str
    content: str | None = None
    title: str | None = None
    username: str | None = None
    author: AuthorOut | None = None
    preview: str

    @classmethod
    def from_snapshot(cls, snapshot: ContentSnapshot) -> "ContentOut":
        return cls(
            id=snapshot.id,
            content=snapshot.content,
            title=snapshot.title,
            username=snapshot.username,
            author=AuthorOut.from_ref(snapshot.author) if snapshot.author else None,
            preview=snapshot.preview(),
        )


class ReportOut(BaseModel):
    id: str
    type: ReportType
    reason: ReportReason
    reason_label: str
    description: str | None = None
    status: ReportStatus
    action: ReportAction | None = None
    available_actions: list[ReportAction]
    reporter: UserOut
    reported_user: UserOut | None = None
    reported_content: ContentOut | None = None
    resolved_by: AuthorOut | None = None
    resolved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    resolving: bool = False

    @classmethod
    def from_report(cls, report: Report, *, store: ReportStore | None = None) -> "ReportOut":
        return cls(
            id=report.id,
            type=report.type,
            reason=report.reason,
            reason_label=report.reason.label,
            description=report.description,
            status=report.status,
            action=report.action,
            available_actions=list(engine.available_actions(report)),
            reporter=UserOut.from_ref(report.reporter),
            reported_user=UserOut.from_ref(report.reported_user) if report.reported_user else None,
            reported_content=ContentOut.from_snapshot(report.reported_content) if report.reported_content else None,
            resolved_by=AuthorOut.from_ref(report.resolved_by) if report.resolved_by else None,
            resolved_at=report.resolved_at,
            created_at=report.created_at,
            updated_at=report.updated_at,
            resolving=store.is_resolving(report.id) if store else False,
        )


class PaginationOut(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool
    first_item: int
    last_item: int

    @classmethod
    def from_pagination(cls, pagination: Pagination, *, page_size: int) -> "PaginationOut":
        return cls(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            total_items=pagination.total_items,
            has_next_page=pagination.has_next_page,
            has_prev_page=pagination.has_prev_page,
            first_item=pagination.first_item(page_size),
            last_item=pagination.last_item(page_size),
        )


class FiltersOut(BaseModel):
    type: ReportType | None = None
    status: ReportStatus | None = None


class ReportListResponse(BaseModel):
    reports: list[ReportOut]
    pagination: PaginationOut | None
    filters: FiltersOut
    selected_id: str | None = None
    # True while a newer page request is unanswered; the rows may predate ``filters``.
    loading: bool = False
    error: str | None = None

    @classmethod
    def from_store(cls, store: ReportStore) -> "ReportListResponse":
        pagination = store.pagination
        selection = store.selection if store.detail_open else None
        return cls(
            reports=[ReportOut.from_report(report, store=store) for report in store.reports],
            pagination=PaginationOut.from_pagination(pagination, page_size=store.page_size) if pagination else None,
            filters=FiltersOut(type=store.filters.type, status=store.filters.status),
            selected_id=selection.id if selection else None,
            loading=store.loading,
            error=store.error,
        )


class ResolveIn(BaseModel):
    # Kept as a plain string so unknown values reach the engine's legality check.
    action: str


class LabelOut(BaseModel):
    value: str
    label: str


class MetaOut(BaseModel):
    types: list[str]
    statuses: list[str]
    actions: list[str]
    reasons: list[LabelOut]
    page_size: int


async def get_admin_context(user: AuthenticatedUser = Depends(get_current_user)) -> AdminContext:
    return resolve_admin_context(user)


def get_store_dep(context: AdminContext = Depends(get_admin_context)) -> ReportStore:
    return get_report_store(context)


@router.get("/meta", response_model=MetaOut)
async def report_meta(store: ReportStore = Depends(get_store_dep)) -> MetaOut:
    return MetaOut(
        types=[item.value for item in ReportType],
        statuses=[item.value for item in ReportStatus],
        actions=[item.value for item in ReportAction],
        reasons=[LabelOut(value=reason.value, label=reason.label) for reason in ReportReason],
        page_size=store.page_size,
    )


@router.get("", response_model=ReportListResponse)
async def list_reports(
    type: str | None = Query(default=None),  # noqa: A002 - mirrors the console's filter name
    status_filter: str | None = Query(default=ReportStatus.PENDING.value, alias="status"),
    page: int = Query(default=1, ge=1),
    store: ReportStore = Depends(get_store_dep),
) -> ReportListResponse:
    filters = ReportFilterSet.parse(type=type, status=status_filter)
    if filters != store.filters:
        await store.set_filters(filters)
    else:
        await store.load_page(filters, page)
    return ReportListResponse.from_store(store)


@router.post("/refresh", response_model=ReportListResponse)
async def refresh_reports(store: ReportStore = Depends(get_store_dep)) -> ReportListResponse:
    await store.refresh()
    return ReportListResponse.from_store(store)


@router.delete("/selection", status_code=status.HTTP_204_NO_CONTENT)
async def close_report_detail(store: ReportStore = Depends(get_store_dep)) -> None:
    store.close_detail()


@router.get("/{report_id}", response_model=ReportOut)
async def select_report(report_id: str, store: ReportStore = Depends(get_store_dep)) -> ReportOut:
    return ReportOut.from_report(store.select(report_id), store=store)


@router.post("/{report_id}/resolve", response_model=ReportOut)
async def resolve_report(
    report_id: str,
    body: ResolveIn,
    store: ReportStore = Depends(get_store_dep),
) -> ReportOut:
    resolved = await store.apply_resolution(report_id, body.action)
    return ReportOut.from_report(resolved, store=store)
