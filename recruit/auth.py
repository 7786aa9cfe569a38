"""Role-based access checks for API routes.

Authentication itself is done upstream; the provider forwards the signed-in
user's id and role as request headers (names configurable via ``AUTH_*``).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from fastapi import HTTPException, Request, status

from .config import settings
from .models import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The signed-in user as seen by this service."""
    user_id: str | None
    role: Role | None


def get_principal(request: Request) -> Principal | None:
    """Read the principal from auth headers; None when not signed in."""
    user_id = (request.headers.get(settings.auth.user_id_header) or "").strip() or None
    raw_role = (request.headers.get(settings.auth.role_header) or "").strip().upper()

    if user_id is None and not raw_role:
        return None

    try:
        role = Role(raw_role) if raw_role else None
    except ValueError:
        logger.warning(f"Ignoring unknown role header value: {raw_role!r}")
        role = None

    return Principal(user_id=user_id, role=role)


def require_user(request: Request) -> Principal:
    """Dependency: any signed-in user with an id."""
    principal = get_principal(request)
    if principal is None or principal.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Not logged in or user ID missing.",
        )
    return principal


def require_roles(*roles: Role) -> Callable[[Request], Principal]:
    """Dependency factory: signed-in user holding one of ``roles``."""
    allowed = set(roles)
    required = " or ".join(r.value for r in roles)

    def dependency(request: Request) -> Principal:
        principal = get_principal(request)
        if principal is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized: Not logged in",
            )
        if principal.role is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden: User role not found",
            )
        if principal.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    f"Forbidden: User does not have the required role(s). "
                    f"Required: {required}. User has: {principal.role.value}"
                ),
            )
        return principal

    return dependency


require_recruiter = require_roles(Role.ADMIN, Role.RECRUITER)
