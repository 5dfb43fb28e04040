"""Adapter from the report service's response shapes to the known schemas.

The service has answered with a bare body, a ``{"success": ..., "data": ...}``
envelope, a report nested under ``"report"``, and references that are either
populated objects or bare ids. All of that tolerance lives here; the schemas in
:mod:`devmatch.moderation.infra.schemas` stay strict.
"""

from __future__ import annotations

from typing import Any, Mapping

from devmatch.moderation.domain.errors import ResponseDecodeError

_USER_REFERENCE_KEYS = ("reporter", "reportedUser", "resolvedBy")


def unwrap_envelope(payload: Any) -> Any:
    if isinstance(payload, Mapping) and "data" in payload and isinstance(payload["data"], (Mapping, list)):
        return payload["data"]
    return payload


def _reference(value: Any) -> Any:
    if isinstance(value, str):
        return {"_id": value}
    return value


def normalize_report(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise ResponseDecodeError("report payload is not an object")
    report = dict(payload)
    for key in _USER_REFERENCE_KEYS:
        if key in report:
            report[key] = _reference(report[key])
    content = report.get("reportedContent")
    if content is not None:
        content = _reference(content)
        if isinstance(content, Mapping) and "author" in content:
            content = {**content, "author": _reference(content["author"])}
        report["reportedContent"] = content
    return report


def adapt_report_payload(payload: Any) -> dict[str, Any]:
    body = unwrap_envelope(payload)
    if isinstance(body, Mapping) and "report" in body and not ("_id" in body or "id" in body):
        body = body["report"]
    return normalize_report(body)


def adapt_page_payload(payload: Any, *, page: int) -> dict[str, Any]:
    """Return ``{"reports": [...], "pagination": {...}}`` for a list response.

    A missing pagination block is rebuilt as a single window around the
    returned reports.
    """

    body = unwrap_envelope(payload)
    if isinstance(body, list):
        body = {"reports": body}
    if not isinstance(body, Mapping) or not isinstance(body.get("reports"), list):
        raise ResponseDecodeError("report list payload has no reports array")
    reports = [normalize_report(item) for item in body["reports"]]
    pagination = body.get("pagination")
    if pagination is None:
        total = len(reports)
        pagination = {
            "currentPage": page,
            "totalPages": 1 if total else 0,
            "totalItems": total,
            "hasNextPage": False,
            "hasPrevPage": page > 1,
        }
    return {"reports": reports, "pagination": pagination}
