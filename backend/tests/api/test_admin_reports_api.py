from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from devmatch.moderation.domain import container
from devmatch.moderation.domain.errors import TransportError
from devmatch.moderation.domain.models import AuthorRef, ReportAction, ReportReason, ReportStatus, ReportType
from devmatch.moderation.domain.report_service import InMemoryReportService

BASE = "/api/admin/v1/reports"


class GatedReportService(InMemoryReportService):
    """Holds the given list calls open until the test releases them."""

    def __init__(self, held_calls: tuple[int, ...]) -> None:
        super().__init__()
        self.calls = 0
        self.entered = {call: asyncio.Event() for call in held_calls}
        self.release = {call: asyncio.Event() for call in held_calls}

    async def list_reports(self, query):
        self.calls += 1
        call = self.calls
        if call in self.release:
            self.entered[call].set()
            await self.release[call].wait()
        return await super().list_reports(query)


@pytest.fixture
def seeded(report_service: InMemoryReportService, make_report) -> InMemoryReportService:
    report_service.seed(
        [
            make_report("r1", age_minutes=1),
            make_report("r2", age_minutes=2, type=ReportType.COMMENT, reason=ReportReason.HARASSMENT),
            make_report("r3", age_minutes=3, type=ReportType.JOB),
        ]
    )
    return report_service


@pytest.mark.asyncio
async def test_console_requires_admin_role(api_client: AsyncClient) -> None:
    resp = await api_client.get(BASE, headers={"X-User-Id": "u1", "X-User-Roles": "member"})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "admin_required"
    assert resp.json()["request_id"] == resp.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_console_requires_identity(api_client: AsyncClient) -> None:
    resp = await api_client.get(BASE)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "invalid_token"


@pytest.mark.asyncio
async def test_list_defaults_to_pending_reports(api_client: AsyncClient, admin_headers, seeded) -> None:
    resp = await api_client.get(BASE, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert [item["id"] for item in body["reports"]] == ["r1", "r2", "r3"]
    assert body["filters"] == {"type": None, "status": "PENDING"}
    assert body["pagination"]["total_items"] == 3
    assert body["pagination"]["first_item"] == 1
    assert body["pagination"]["last_item"] == 3
    assert body["selected_id"] is None
    assert body["loading"] is False
    first = body["reports"][0]
    assert first["reason_label"] == "Spam or misleading"
    assert first["available_actions"] == ["DISMISS", "WARN", "REMOVE", "BAN"]
    assert first["reported_content"]["preview"] == '"buy cheap followers"'
    assert first["resolving"] is False


@pytest.mark.asyncio
async def test_list_applies_type_filter_and_all(api_client: AsyncClient, admin_headers, seeded) -> None:
    resp = await api_client.get(BASE, params={"type": "JOB", "status": "all"}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert [item["id"] for item in body["reports"]] == ["r3"]
    assert body["filters"] == {"type": "JOB", "status": None}


@pytest.mark.asyncio
async def test_invalid_filter_is_rejected(api_client: AsyncClient, admin_headers, seeded) -> None:
    resp = await api_client.get(BASE, params={"status": "ARCHIVED"}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "invalid_report_status"


@pytest.mark.asyncio
async def test_invalid_page_is_rejected(api_client: AsyncClient, admin_headers, seeded) -> None:
    resp = await api_client.get(BASE, params={"page": 0}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "validation_error"


@pytest.mark.asyncio
async def test_select_resolve_and_reload_flow(api_client: AsyncClient, admin_headers, seeded) -> None:
    await api_client.get(BASE, headers=admin_headers)

    selected = await api_client.get(f"{BASE}/r2", headers=admin_headers)
    assert selected.status_code == 200
    assert selected.json()["reason_label"] == "Harassment or bullying"
    listing = await api_client.post(f"{BASE}/refresh", headers=admin_headers)
    assert listing.json()["selected_id"] == "r2"

    resolved = await api_client.post(f"{BASE}/r2/resolve", json={"action": "BAN"}, headers=admin_headers)
    assert resolved.status_code == 200
    body = resolved.json()
    assert body["status"] == "RESOLVED"
    assert body["action"] == "BAN"
    assert body["available_actions"] == []
    assert body["resolved_by"] == {"id": "admin-1", "username": "ada"}
    assert seeded.get("r2").resolved_by.id == "admin-1"
    assert seeded.get("r2").status is ReportStatus.RESOLVED

    again = await api_client.post(f"{BASE}/r2/resolve", json={"action": "WARN"}, headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["detail"] == "invalid_report_state"
    assert again.json()["report_id"] == "r2"

    pending = await api_client.post(f"{BASE}/refresh", headers=admin_headers)
    assert [item["id"] for item in pending.json()["reports"]] == ["r1", "r3"]
    assert pending.json()["selected_id"] is None

    resolved_view = await api_client.get(BASE, params={"status": "RESOLVED"}, headers=admin_headers)
    assert [item["id"] for item in resolved_view.json()["reports"]] == ["r2"]


@pytest.mark.asyncio
async def test_resolve_closes_detail_panel(api_client: AsyncClient, admin_headers, seeded) -> None:
    await api_client.get(BASE, params={"status": "all"}, headers=admin_headers)
    await api_client.get(f"{BASE}/r1", headers=admin_headers)

    await api_client.post(f"{BASE}/r1/resolve", json={"action": "DISMISS"}, headers=admin_headers)
    listing = await api_client.post(f"{BASE}/refresh", headers=admin_headers)

    assert listing.json()["selected_id"] is None
    statuses = {item["id"]: item["status"] for item in listing.json()["reports"]}
    assert statuses["r1"] == "RESOLVED"


@pytest.mark.asyncio
async def test_close_selection(api_client: AsyncClient, admin_headers, seeded) -> None:
    await api_client.get(BASE, headers=admin_headers)
    await api_client.get(f"{BASE}/r1", headers=admin_headers)

    resp = await api_client.delete(f"{BASE}/selection", headers=admin_headers)
    assert resp.status_code == 204
    listing = await api_client.post(f"{BASE}/refresh", headers=admin_headers)
    assert listing.json()["selected_id"] is None


@pytest.mark.asyncio
async def test_unknown_action_is_unprocessable(api_client: AsyncClient, admin_headers, seeded) -> None:
    await api_client.get(BASE, headers=admin_headers)
    resp = await api_client.post(f"{BASE}/r1/resolve", json={"action": "NUKE"}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "invalid_report_action"
    assert seeded.get("r1").status is ReportStatus.PENDING


@pytest.mark.asyncio
async def test_unloaded_report_is_not_found(api_client: AsyncClient, admin_headers, seeded) -> None:
    await api_client.get(BASE, headers=admin_headers)
    resp = await api_client.get(f"{BASE}/missing", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "report_not_found"


@pytest.mark.asyncio
async def test_service_rejection_maps_to_forbidden(api_client: AsyncClient, admin_headers, seeded) -> None:
    await api_client.get(BASE, headers=admin_headers)
    seeded.authorized = False

    resp = await api_client.post(f"{BASE}/r1/resolve", json={"action": "WARN"}, headers=admin_headers)

    assert resp.status_code == 403
    assert resp.json()["detail"] == "admin_required"
    assert seeded.get("r1").status is ReportStatus.PENDING


@pytest.mark.asyncio
async def test_transport_failure_maps_to_bad_gateway(api_client: AsyncClient, admin_headers) -> None:
    class UnavailableService(InMemoryReportService):
        async def list_reports(self, query):
            raise TransportError("report_service_timeout")

    container.configure(service_factory=lambda context: UnavailableService())

    resp = await api_client.get(BASE, headers=admin_headers)

    assert resp.status_code == 502
    assert resp.json()["detail"] == "report_service_unavailable"
    assert resp.json()["message"] == "report_service_timeout"


@pytest.mark.asyncio
async def test_meta_lists_console_vocabulary(api_client: AsyncClient, admin_headers) -> None:
    resp = await api_client.get(f"{BASE}/meta", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["types"] == ["POST", "COMMENT", "USER", "JOB"]
    assert body["statuses"] == ["PENDING", "REVIEWED", "RESOLVED"]
    assert body["actions"] == ["DISMISS", "WARN", "REMOVE", "BAN"]
    assert body["page_size"] == 10
    assert {"value": "FAKE", "label": "Fake or fraudulent"} in body["reasons"]


@pytest.mark.asyncio
async def test_health(api_client: AsyncClient) -> None:
    resp = await api_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_superseded_list_response_is_marked_loading(api_client: AsyncClient, admin_headers, make_report) -> None:
    service = GatedReportService(held_calls=(2, 3))
    service.seed(
        [
            make_report("p1", age_minutes=1),
            make_report("p2", age_minutes=2),
            make_report(
                "done",
                age_minutes=3,
                status=ReportStatus.RESOLVED,
                action=ReportAction.DISMISS,
                resolved_by=AuthorRef(id="admin-1", username="ada"),
                resolved_at=datetime(2024, 5, 1, 13, 0, tzinfo=timezone.utc),
            ),
        ]
    )
    container.configure(service_factory=lambda context: service)
    settled = await api_client.get(BASE, headers=admin_headers)
    assert settled.json()["loading"] is False

    older = asyncio.create_task(api_client.get(BASE, params={"status": "REVIEWED"}, headers=admin_headers))
    await service.entered[2].wait()
    newer = asyncio.create_task(api_client.get(BASE, params={"status": "RESOLVED"}, headers=admin_headers))
    await service.entered[3].wait()

    service.release[2].set()
    unsettled = (await older).json()
    assert unsettled["loading"] is True
    assert unsettled["filters"]["status"] == "RESOLVED"
    assert [item["id"] for item in unsettled["reports"]] == ["p1", "p2"]

    service.release[3].set()
    latest = (await newer).json()
    assert latest["loading"] is False
    assert latest["filters"]["status"] == "RESOLVED"
    assert [item["id"] for item in latest["reports"]] == ["done"]
