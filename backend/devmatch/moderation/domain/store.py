"""Report store: one consistent view of reports across list and detail.

The store runs on a single event loop. Two ordering rules apply:

* page loads are last-request-wins. Every load is tagged with a sequence
  number and a response is applied only if its tag is still the latest issued;
  superseded responses are dropped on arrival, not cancelled.
* resolutions are at most once in flight per report. A second resolve for a
  report whose first call has not returned is rejected before any network
  call. Different reports do not coordinate.

Nothing is mutated until the report service confirms, so a failed call leaves
the store exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional

from devmatch.moderation.domain import engine
from devmatch.moderation.domain.errors import (
    ModerationError,
    ReportNotFoundError,
    ResolutionInFlightError,
)
from devmatch.moderation.domain.filters import ReportFilterSet, ReportQuery
from devmatch.moderation.domain.models import AuthorRef, Report, ReportAction
from devmatch.moderation.domain.pagination import Pagination, sanitized_limit, validate_page
from devmatch.moderation.domain.report_service import ReportService
from devmatch.obs import logging as obs_logging
from devmatch.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _action_label(action: Any) -> str:
    try:
        return ReportAction(action).value
    except ValueError:
        return "invalid"


@dataclass(frozen=True, slots=True)
class PageLoad:
    """What one load returned, and whether it reached the store.

    Unpacks as ``reports, pagination``.
    """

    reports: tuple[Report, ...]
    pagination: Pagination
    applied: bool

    def __iter__(self) -> Iterator[Any]:
        yield self.reports
        yield self.pagination


class ReportStore:
    def __init__(
        self,
        service: ReportService,
        *,
        actor: AuthorRef,
        page_size: int = 10,
        filters: Optional[ReportFilterSet] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._service = service
        self._actor = actor
        self._page_size = sanitized_limit(page_size)
        self._clock = clock
        self._filters = filters or ReportFilterSet.default()
        self._page = 1
        self._reports: list[Report] = []
        self._pagination: Optional[Pagination] = None
        self._selection: Optional[Report] = None
        self._detail_open = False
        self._error: Optional[str] = None
        self._issued = 0
        self._applied = 0
        self._resolving: set[str] = set()

    @property
    def reports(self) -> tuple[Report, ...]:
        return tuple(self._reports)

    @property
    def pagination(self) -> Optional[Pagination]:
        return self._pagination

    @property
    def filters(self) -> ReportFilterSet:
        return self._filters

    @property
    def page(self) -> int:
        return self._page

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def selection(self) -> Optional[Report]:
        """The entity behind the detail panel, kept in sync with the list."""
        return self._selection

    @property
    def detail_open(self) -> bool:
        return self._detail_open

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def loading(self) -> bool:
        return self._applied < self._issued

    def is_resolving(self, report_id: str) -> bool:
        return report_id in self._resolving

    def get(self, report_id: str) -> Optional[Report]:
        for report in self._reports:
            if report.id == report_id:
                return report
        return None

    def use_service(self, service: ReportService) -> None:
        """Send later calls through ``service``; calls already in flight finish on the old one."""
        self._service = service

    async def load_page(self, filters: Optional[ReportFilterSet] = None, page: int = 1) -> PageLoad:
        normalized = (filters if filters is not None else self._filters).validated()
        query = ReportQuery(filters=normalized, page=validate_page(page), limit=self._page_size)
        self._issued += 1
        tag = self._issued
        self._filters = normalized
        self._page = query.page
        self._error = None
        try:
            result = await self._service.list_reports(query)
        except ModerationError as exc:
            obs_metrics.page_load("error")
            if tag == self._issued:
                self._applied = tag
                self._error = exc.message
            logger.warning(
                "report page load failed",
                extra={"code": exc.code, "page": query.page, "request_tag": tag},
            )
            raise
        if tag != self._issued:
            obs_metrics.stale_response()
            logger.info(
                "discarding superseded report page",
                extra={"request_tag": tag, "latest_tag": self._issued},
            )
            return PageLoad(reports=result.reports, pagination=result.pagination, applied=False)
        self._applied = tag
        self._reports = list(result.reports)
        self._pagination = result.pagination
        self._resync_selection()
        obs_metrics.page_load("applied")
        return PageLoad(reports=result.reports, pagination=result.pagination, applied=True)

    async def refresh(self) -> PageLoad:
        return await self.load_page(self._filters, self._page)

    async def set_filters(self, filters: ReportFilterSet) -> PageLoad:
        """Apply new filters; the list always restarts at the first page."""
        return await self.load_page(filters, 1)

    async def next_page(self) -> PageLoad:
        target = self._pagination.next_page() if self._pagination else self._page
        return await self.load_page(self._filters, target)

    async def prev_page(self) -> PageLoad:
        target = self._pagination.prev_page() if self._pagination else self._page
        return await self.load_page(self._filters, target)

    def _resync_selection(self) -> None:
        if self._selection is None:
            return
        current = self.get(self._selection.id)
        if current is None:
            self._selection = None
            self._detail_open = False
        else:
            self._selection = current

    def select(self, report_id: str) -> Report:
        """Open the detail panel from the cached list entry, without a re-fetch."""
        report = self.get(report_id)
        if report is None:
            raise ReportNotFoundError(f"report {report_id} is not loaded", report_id=report_id)
        self._selection = report
        self._detail_open = True
        return report

    def close_detail(self) -> None:
        self._selection = None
        self._detail_open = False

    async def apply_resolution(self, report_id: str, action: Any) -> Report:
        report = self.get(report_id)
        if report is None:
            raise ReportNotFoundError(f"report {report_id} is not loaded", report_id=report_id)
        if report_id in self._resolving:
            obs_metrics.resolution("none", ResolutionInFlightError.code)
            raise ResolutionInFlightError(f"report {report_id} is already being resolved", report_id=report_id)
        try:
            parsed = engine.check_resolvable(report, action)
        except ModerationError as exc:
            obs_metrics.resolution(_action_label(action), exc.code)
            raise
        expected = engine.resolve(report, parsed, actor=self._actor, now=self._clock())
        self._resolving.add(report_id)
        with obs_logging.bound(report_id=report_id):
            try:
                confirmed = await self._service.resolve_report(report_id, parsed)
            except ModerationError as exc:
                obs_metrics.resolution(parsed.value, exc.code)
                logger.warning("report resolution failed", extra={"action": parsed.value, "code": exc.code})
                raise
            finally:
                self._resolving.discard(report_id)
            transition = engine.plan_resolution(report, expected, confirmed)
            self._apply(transition)
            obs_metrics.resolution(parsed.value, "resolved")
            logger.info("report resolved", extra={"action": parsed.value, "resolved_by": transition.after.resolved_by.id})
        return transition.after

    def _apply(self, transition: engine.Transition) -> None:
        updated = transition.after
        for index, report in enumerate(self._reports):
            if report.id == updated.id:
                self._reports[index] = updated
                break
        if self._selection is not None and self._selection.id == updated.id:
            self._selection = updated
        if transition.close_detail:
            self._detail_open = False
