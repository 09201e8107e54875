# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from storekeeper.exceptions import PermissionDeniedError
from storekeeper.models.enums import UserRole
from storekeeper.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: int = Header(),
    x_role: UserRole = Header(default=UserRole.REQUESTER),
    x_forwarded_for: str | None = Header(default=None),
) -> AuthContext:
    """Extract dev auth context from request headers.

    The first hop of ``X-Forwarded-For`` is kept as the audit IP.
    """
    ip_address = x_forwarded_for.split(",")[0].strip() if x_forwarded_for else None
    return AuthContext(user_id=x_user_id, role=x_role, ip_address=ip_address or None)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_superadmin(auth: AuthDep) -> AuthContext:
    """Require the superadmin role for the request."""
    if not auth.is_superadmin:
        raise PermissionDeniedError("Superadmin access required")
    return auth


SuperadminDep = Annotated[AuthContext, Depends(require_superadmin)]


async def require_stock_manager(auth: AuthDep) -> AuthContext:
    """Catalog and stock changes are limited to issuers and superadmins."""
    if auth.role not in (UserRole.ISSUER, UserRole.SUPERADMIN):
        raise PermissionDeniedError("Issuer access required")
    return auth


StockManagerDep = Annotated[AuthContext, Depends(require_stock_manager)]
