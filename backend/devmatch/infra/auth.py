"""Authentication helpers for the moderation console endpoints.

The console does not issue or verify sessions itself. A bearer token presented
by the operator is forwarded to the report service, which remains the
authoritative authorization check. The admin role gate lives in
:mod:`devmatch.moderation.domain.rbac`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from devmatch.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	username: Optional[str] = None
	roles: Tuple[str, ...] = ()
	access_token: Optional[str] = None

	def has_role(self, role: str) -> bool:
		return role.lower() in self.roles

	@property
	def is_admin(self) -> bool:
		return any(self.has_role(role) for role in settings.admin_roles)


_bearer_scheme = HTTPBearer(auto_error=False)


def _parse_roles(raw: Optional[str]) -> Tuple[str, ...]:
	if not raw:
		return ()
	return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	x_user_name: Optional[str] = Header(default=None, alias="X-User-Name"),
	x_user_roles: Optional[str] = Header(default=None, alias="X-User-Roles"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the operator.

	A bearer token is required outside development. In development the
	X-User-* headers alone are enough, and the configured service token is used
	for the remote calls.
	"""
	token: Optional[str] = None
	if credentials and credentials.scheme.lower() == "bearer":
		token = credentials.credentials
	if not x_user_id:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	if token is None and not settings.is_dev():
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	return AuthenticatedUser(
		id=x_user_id,
		username=x_user_name,
		roles=_parse_roles(x_user_roles),
		access_token=token,
	)

