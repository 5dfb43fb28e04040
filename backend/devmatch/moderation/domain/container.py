"""Lightweight service container for the moderation console.

Each operator gets one :class:`ReportStore`, keyed by actor id. A new bearer
token rebinds that store to a service carrying the token rather than opening a
second store. All stores share one httpx client.
"""

from __future__ import annotations

from typing import Callable, Optional

import httpx

from devmatch.moderation.domain.rbac import AdminContext
from devmatch.moderation.domain.report_service import ReportService
from devmatch.moderation.domain.store import ReportStore
from devmatch.moderation.infra.http_report_service import HttpReportService
from devmatch.settings import settings

ServiceFactory = Callable[[AdminContext], ReportService]

_http_client: Optional[httpx.AsyncClient] = None
_service_factory: Optional[ServiceFactory] = None
# actor id -> (token the store's service was built with, store)
_stores: dict[str, tuple[Optional[str], ReportStore]] = {}


def _get_http_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=settings.report_service_timeout_seconds)
    return _http_client


def _http_service(context: AdminContext) -> ReportService:
    return HttpReportService(
        http=_get_http_client(),
        base_url=settings.report_service_url,
        token=context.user.access_token or settings.report_service_token,
        timeout=settings.report_service_timeout_seconds,
    )


def configure(
    *,
    service_factory: Optional[ServiceFactory] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> None:
    """Swap collaborators and drop existing sessions."""

    global _service_factory, _http_client
    _service_factory = service_factory
    if http_client is not None:
        _http_client = http_client
    _stores.clear()


def get_report_store(context: AdminContext) -> ReportStore:
    token = context.user.access_token
    factory = _service_factory or _http_service
    entry = _stores.get(context.actor_id)
    if entry is None:
        store = ReportStore(
            factory(context),
            actor=context.actor,
            page_size=settings.report_page_size,
        )
    else:
        bound_token, store = entry
        if bound_token != token:
            store.use_service(factory(context))
    _stores[context.actor_id] = (token, store)
    return store


async def shutdown() -> None:
    global _http_client
    _stores.clear()
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
