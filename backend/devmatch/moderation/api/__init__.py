"""Moderation API routers."""

from fastapi import APIRouter

from . import admin_reports

router = APIRouter()
router.include_router(admin_reports.router)

__all__ = ["router"]
