import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from devmatch.main import app
from devmatch.moderation.domain import container
from devmatch.moderation.domain.models import (
	ContentSnapshot,
	Report,
	ReportReason,
	ReportStatus,
	ReportType,
	UserRef,
)
from devmatch.moderation.domain.report_service import InMemoryReportService
from devmatch.settings import settings

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def build_report(
	report_id: str,
	*,
	status: ReportStatus = ReportStatus.PENDING,
	type: ReportType = ReportType.POST,
	reason: ReportReason = ReportReason.SPAM,
	age_minutes: int = 0,
	**overrides,
) -> Report:
	created = BASE_TIME - timedelta(minutes=age_minutes)
	fields = dict(
		id=report_id,
		type=type,
		reason=reason,
		status=status,
		reporter=UserRef(id=f"reporter-{report_id}", username="reporter"),
		created_at=created,
		updated_at=created,
		reported_user=UserRef(id="u-target", username="target"),
		reported_content=ContentSnapshot(id=f"content-{report_id}", content="buy cheap followers"),
	)
	fields.update(overrides)
	return Report(**fields)


@pytest.fixture
def make_report():
	return build_report


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Ensure a consistent test environment.

	API tests authenticate via X-User-* headers, which are only accepted in dev
	mode without a bearer token.
	"""
	original_env = settings.environment
	original_roles = settings.admin_roles
	original_page_size = settings.report_page_size
	settings.environment = "dev"
	settings.admin_roles = ("admin",)
	settings.report_page_size = 10
	try:
		yield
	finally:
		settings.environment = original_env
		settings.admin_roles = original_roles
		settings.report_page_size = original_page_size


@pytest.fixture
def report_service() -> InMemoryReportService:
	return InMemoryReportService()


@pytest.fixture(autouse=True)
def configure_moderation(report_service):
	def service_for(context):
		# The remote service stamps resolvedBy from the caller's credential.
		report_service.resolver = context.actor
		return report_service

	container.configure(service_factory=service_for)
	try:
		yield
	finally:
		container.configure()


@pytest.fixture
def admin_headers() -> dict[str, str]:
	return {"X-User-Id": "admin-1", "X-User-Name": "ada", "X-User-Roles": "admin"}


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
