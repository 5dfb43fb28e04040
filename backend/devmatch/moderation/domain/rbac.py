"""RBAC utilities for the moderation console."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, status

from devmatch.infra.auth import AuthenticatedUser
from devmatch.moderation.domain.models import AuthorRef


@dataclass(slots=True)
class AdminContext:
    """Resolved admin context used throughout the console API."""

    user: AuthenticatedUser

    @property
    def actor_id(self) -> str:
        return self.user.id

    @property
    def actor(self) -> AuthorRef:
        """The reference recorded as ``resolved_by`` on local transitions."""
        return AuthorRef(id=self.user.id, username=self.user.username or self.user.id)


def resolve_admin_context(user: AuthenticatedUser) -> AdminContext:
    """Gate the console to administrators.

    This check is for the operator's convenience; the report service performs
    the authoritative one on every mutating call.
    """

    if not user.is_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_required")
    return AdminContext(user=user)
