"""Boundary with the remote report service and an in-memory implementation."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from devmatch.moderation.domain.errors import (
    AuthorizationError,
    InvalidStateError,
    ReportNotFoundError,
)
from devmatch.moderation.domain.filters import ReportQuery
from devmatch.moderation.domain.models import AuthorRef, Report, ReportAction, ReportStatus
from devmatch.moderation.domain.pagination import Pagination


@dataclass(frozen=True, slots=True)
class ReportPage:
    reports: tuple[Report, ...]
    pagination: Pagination


class ReportService(Protocol):
    """Contract of the remote report API.

    ``resolve_report`` is a single atomic request; implementations never
    perform partial updates.
    """

    async def list_reports(self, query: ReportQuery) -> ReportPage:
        ...

    async def resolve_report(self, report_id: str, action: ReportAction) -> Report:
        ...


@dataclass
class InMemoryReportService(ReportService):
    """Server-side semantics kept in process, for local runs and tests.

    Like the real service it has no concurrency token: the first resolve wins
    and later ones fail with :class:`InvalidStateError`.
    """

    resolver: AuthorRef = field(default_factory=lambda: AuthorRef(id="admin", username="admin"))
    authorized: bool = True
    reports: dict[str, Report] = field(default_factory=dict)

    def seed(self, reports: Iterable[Report]) -> None:
        for report in reports:
            self.reports[report.id] = report

    async def list_reports(self, query: ReportQuery) -> ReportPage:
        params = query.params()
        limit = params["limit"]
        page = params["page"]
        matching = [
            report
            for report in self.reports.values()
            if query.filters.matches(report.type, report.status)
        ]
        matching.sort(key=lambda report: (report.created_at, report.id), reverse=True)
        total_items = len(matching)
        total_pages = math.ceil(total_items / limit) if total_items else 0
        start = (page - 1) * limit
        window = tuple(matching[start : start + limit])
        pagination = Pagination(
            current_page=page,
            total_pages=total_pages,
            total_items=total_items,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )
        return ReportPage(reports=window, pagination=pagination)

    async def resolve_report(self, report_id: str, action: ReportAction) -> Report:
        if not self.authorized:
            raise AuthorizationError("admin_required", report_id=report_id)
        report = self.reports.get(report_id)
        if report is None:
            raise ReportNotFoundError(report_id, report_id=report_id)
        if report.status is ReportStatus.RESOLVED:
            raise InvalidStateError("report already resolved", report_id=report_id)
        now = datetime.now(timezone.utc)
        updated = dataclasses.replace(
            report,
            status=ReportStatus.RESOLVED,
            action=ReportAction(action),
            resolved_by=self.resolver,
            resolved_at=now,
            updated_at=now,
        )
        self.reports[report_id] = updated
        return updated

    def get(self, report_id: str) -> Optional[Report]:
        return self.reports.get(report_id)
