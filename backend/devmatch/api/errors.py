"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from devmatch.api.request_id import get_request_id
from devmatch.moderation.domain.errors import (
    AuthorizationError,
    InvalidActionError,
    InvalidFilterError,
    InvalidStateError,
    ModerationError,
    ReportNotFoundError,
    ResolutionInFlightError,
    TransportError,
)
from devmatch.moderation.domain.pagination import InvalidPageError

logger = logging.getLogger(__name__)

_MODERATION_STATUS: tuple[tuple[type[ModerationError], int], ...] = (
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (ResolutionInFlightError, status.HTTP_409_CONFLICT),
    (InvalidActionError, 422),
    (ReportNotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (TransportError, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: ModerationError) -> int:
    for error_type, status_code in _MODERATION_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        payload = {"detail": exc.detail, "request_id": get_request_id()}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        payload = {"detail": "validation_error", "errors": exc.errors(), "request_id": get_request_id()}
        return JSONResponse(status_code=422, content=payload)

    @app.exception_handler(ModerationError)
    async def moderation_exc_handler(request: Request, exc: ModerationError):  # type: ignore[override]
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("moderation request failed", extra={"code": exc.code, "path": request.url.path})
        payload = {
            "detail": exc.code,
            "message": exc.message,
            "report_id": exc.report_id,
            "request_id": get_request_id(),
        }
        return JSONResponse(status_code=status_code, content=payload)

    @app.exception_handler(InvalidFilterError)
    @app.exception_handler(InvalidPageError)
    async def filter_exc_handler(request: Request, exc: ValueError):  # type: ignore[override]
        payload = {"detail": str(exc), "request_id": get_request_id()}
        return JSONResponse(status_code=422, content=payload)
