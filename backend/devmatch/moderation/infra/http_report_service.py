"""httpx client for the remote report service."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from devmatch.moderation.domain.errors import (
    AuthorizationError,
    InvalidActionError,
    InvalidStateError,
    ModerationError,
    ReportNotFoundError,
    ResponseDecodeError,
    TransportError,
)
from devmatch.moderation.domain.filters import ReportQuery
from devmatch.moderation.domain.models import Report, ReportAction
from devmatch.moderation.domain.report_service import ReportPage, ReportService
from devmatch.moderation.infra.envelope import adapt_page_payload, adapt_report_payload
from devmatch.moderation.infra.schemas import decode_page, decode_report
from devmatch.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, Mapping):
        return None
    for key in ("message", "detail", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def error_for_response(response: httpx.Response, *, report_id: Optional[str] = None) -> ModerationError:
    """Map a failed report service response onto the moderation taxonomy."""

    status_code = response.status_code
    message = _error_message(response)
    if status_code in (401, 403):
        return AuthorizationError(message, report_id=report_id)
    if status_code == 404:
        return ReportNotFoundError(message, report_id=report_id)
    if status_code == 409:
        return InvalidStateError(message, report_id=report_id)
    if status_code == 400 and message and "action" in message.lower():
        return InvalidActionError(message, report_id=report_id)
    return TransportError(
        message or f"report service returned {status_code}",
        report_id=report_id,
        status_code=status_code,
    )


@dataclass
class HttpReportService(ReportService):
    """Report service client over the platform REST API.

    No retries are attempted; the transport timeout is the only deadline.
    """

    http: httpx.AsyncClient
    base_url: str
    token: Optional[str] = None
    timeout: float = 10.0

    async def list_reports(self, query: ReportQuery) -> ReportPage:
        response = await self._request("list", "GET", "/admin/reports", params=query.params())
        payload = adapt_page_payload(self._json(response), page=query.page)
        return decode_page(payload)

    async def resolve_report(self, report_id: str, action: ReportAction) -> Report:
        path = f"/admin/reports/{quote(report_id, safe='')}/resolve"
        response = await self._request(
            "resolve",
            "PATCH",
            path,
            json={"action": ReportAction(action).value},
            report_id=report_id,
        )
        return decode_report(adapt_report_payload(self._json(response)))

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
        report_id: Optional[str] = None,
    ) -> httpx.Response:
        url = f"{self.base_url.rstrip('/')}{path}"
        start = time.perf_counter()
        try:
            response = await self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            logger.warning("report service timeout", extra={"operation": operation, "report_id": report_id})
            raise TransportError("report_service_timeout", report_id=report_id) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "report service unreachable",
                extra={"operation": operation, "report_id": report_id, "error": str(exc)},
            )
            raise TransportError("report_service_unreachable", report_id=report_id) from exc
        finally:
            obs_metrics.MOD_REPORT_SERVICE_LATENCY_SECONDS.labels(operation=operation).observe(
                time.perf_counter() - start
            )
        if response.is_error:
            error = error_for_response(response, report_id=report_id)
            logger.info(
                "report service rejected request",
                extra={"operation": operation, "status": response.status_code, "code": error.code},
            )
            raise error
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseDecodeError("report service returned a non-JSON body") from exc
