"""Query building for the admin report listing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .errors import InvalidFilterError
from .models import ReportStatus, ReportType
from .pagination import build_page_params

# The console's select boxes send "all" for "no filter".
_ALL = "all"


def _coerce_type(value: Union[ReportType, str, None]) -> Optional[ReportType]:
    if value is None or value == "" or value == _ALL:
        return None
    try:
        return ReportType(value)
    except ValueError as exc:
        raise InvalidFilterError("invalid_report_type") from exc


def _coerce_status(value: Union[ReportStatus, str, None]) -> Optional[ReportStatus]:
    if value is None or value == "" or value == _ALL:
        return None
    try:
        return ReportStatus(value)
    except ValueError as exc:
        raise InvalidFilterError("invalid_report_status") from exc


@dataclass(frozen=True, slots=True)
class ReportFilterSet:
    """Filter inputs for the report list; ``None`` means unfiltered."""

    type: Optional[ReportType] = None
    status: Optional[ReportStatus] = None

    @classmethod
    def parse(
        cls,
        *,
        type: Union[ReportType, str, None] = None,  # noqa: A002 - mirrors the query parameter
        status: Union[ReportStatus, str, None] = None,
    ) -> "ReportFilterSet":
        return cls(type=_coerce_type(type), status=_coerce_status(status))

    @classmethod
    def default(cls) -> "ReportFilterSet":
        """Pending reports of every type, the console's landing view."""
        return cls(status=ReportStatus.PENDING)

    def validated(self) -> "ReportFilterSet":
        return ReportFilterSet.parse(type=self.type, status=self.status)

    def query_params(self, params: dict[str, Any]) -> dict[str, Any]:
        normalized = self.validated()
        if normalized.type is not None:
            params["type"] = normalized.type.value
        if normalized.status is not None:
            params["status"] = normalized.status.value
        return params

    def matches(self, report_type: ReportType, status: ReportStatus) -> bool:
        if self.type is not None and report_type is not self.type:
            return False
        if self.status is not None and status is not self.status:
            return False
        return True


@dataclass(frozen=True, slots=True)
class ReportQuery:
    filters: ReportFilterSet = field(default_factory=ReportFilterSet)
    page: int = 1
    limit: int = 10

    def params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        self.filters.query_params(params)
        return build_page_params(self.page, self.limit, params)
