"""Moderation package integration helpers exposed to the application."""

from devmatch.moderation.api import router
from devmatch.moderation.domain.container import configure, shutdown

__all__ = ["router", "configure", "shutdown"]
