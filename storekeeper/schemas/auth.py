from __future__ import annotations

from pydantic import BaseModel

from storekeeper.models.enums import UserRole


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: int
    role: UserRole = UserRole.REQUESTER
    ip_address: str | None = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN
