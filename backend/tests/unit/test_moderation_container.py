from __future__ import annotations

from devmatch.infra.auth import AuthenticatedUser
from devmatch.moderation.domain import container
from devmatch.moderation.domain.rbac import AdminContext
from devmatch.moderation.domain.report_service import InMemoryReportService


def _context(user_id: str, token: str | None) -> AdminContext:
    return AdminContext(user=AuthenticatedUser(id=user_id, username=user_id, roles=("admin",), access_token=token))


def _recording_factory(tokens: list[str | None]):
    def factory(context: AdminContext) -> InMemoryReportService:
        tokens.append(context.user.access_token)
        return InMemoryReportService()

    return factory


def test_rotated_tokens_reuse_the_operator_store() -> None:
    built: list[str | None] = []
    container.configure(service_factory=_recording_factory(built))

    first = container.get_report_store(_context("admin-1", "tok-1"))
    for index in range(2, 50):
        assert container.get_report_store(_context("admin-1", f"tok-{index}")) is first

    assert len(container._stores) == 1
    assert built == [f"tok-{index}" for index in range(1, 50)]


def test_same_token_keeps_the_bound_service() -> None:
    built: list[str | None] = []
    container.configure(service_factory=_recording_factory(built))

    store = container.get_report_store(_context("admin-1", "tok-1"))
    assert container.get_report_store(_context("admin-1", "tok-1")) is store

    assert built == ["tok-1"]


def test_each_operator_gets_its_own_store() -> None:
    container.configure(service_factory=_recording_factory([]))

    first = container.get_report_store(_context("admin-1", "tok-1"))
    second = container.get_report_store(_context("admin-2", "tok-1"))

    assert first is not second
    assert len(container._stores) == 2
