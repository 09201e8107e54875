from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import or_, select
from sqlmodel import col

from storekeeper.exceptions import AppError, NotFoundError
from storekeeper.models.base import persisted_id
from storekeeper.models.enums import AuditAction, AuditEntityType, UserRole
from storekeeper.models.user import User
from storekeeper.schemas.request import ApproverResponse
from storekeeper.schemas.user import UserResponse
from storekeeper.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from storekeeper.schemas.auth import AuthContext
    from storekeeper.schemas.user import CreateUserPayload, UpdateUserPayload


def _build_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=persisted_id(user),
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        username=user.username,
        email=user.email,
        role=UserRole(user.role),
        created_at=user.created_at,
    )


def build_approver_response(user: User) -> ApproverResponse:
    return ApproverResponse(id=persisted_id(user), full_name=user.full_name)


async def list_users(session: AsyncSession) -> list[UserResponse]:
    result = await session.execute(select(User).order_by(col(User.last_name), col(User.first_name), col(User.id)))
    return [_build_user_response(u) for u in result.scalars().all()]


async def create_user(session: AsyncSession, auth: AuthContext, payload: CreateUserPayload) -> UserResponse:
    """Create a user. Usernames and emails are unique."""
    username = payload.username.strip()
    email = payload.email.strip().lower()
    existing = await session.execute(
        select(User.id).where(or_(col(User.username) == username, col(User.email) == email))
    )
    if existing.first() is not None:
        raise AppError("A user with this username or email already exists", status_code=409)

    user = User(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        username=username,
        email=email,
        role=payload.role.value,
    )
    session.add(user)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.USER,
        entity_id=persisted_id(user),
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(user),
    )
    await session.commit()
    await session.refresh(user)
    return _build_user_response(user)


async def _get_user_or_404(session: AsyncSession, user_id: int) -> User:
    result = await session.execute(select(User).where(col(User.id) == user_id).with_for_update())
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


async def update_user(
    session: AsyncSession,
    auth: AuthContext,
    user_id: int,
    payload: UpdateUserPayload,
) -> UserResponse:
    """Edit a user's name, email and role. Emails stay unique."""
    user = await _get_user_or_404(session, user_id)
    email = payload.email.strip().lower()
    taken = await session.execute(select(User.id).where(col(User.email) == email, col(User.id) != user_id))
    if taken.first() is not None:
        raise AppError("A user with this email already exists", status_code=409)

    before = model_to_audit_dict(user)
    user.first_name = payload.first_name.strip()
    user.last_name = payload.last_name.strip()
    user.email = email
    user.role = payload.role.value
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.USER,
        entity_id=user_id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(user),
    )
    await session.commit()
    await session.refresh(user)
    return _build_user_response(user)


async def update_user_role(session: AsyncSession, auth: AuthContext, user_id: int, role: UserRole) -> UserResponse:
    user = await _get_user_or_404(session, user_id)
    before = model_to_audit_dict(user)
    user.role = role.value
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.USER,
        entity_id=user_id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(user),
    )
    await session.commit()
    await session.refresh(user)
    return _build_user_response(user)


async def delete_user(session: AsyncSession, auth: AuthContext, user_id: int) -> None:
    """Delete a user. Their pending approver assignments go with them."""
    if user_id == auth.user_id:
        raise AppError("You cannot delete your own account", status_code=400)
    user = await _get_user_or_404(session, user_id)
    before = model_to_audit_dict(user)
    await session.delete(user)
    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.USER,
        entity_id=user_id,
        action=AuditAction.DELETE,
        before_json=before,
    )
    await session.commit()


async def list_approvers(session: AsyncSession) -> list[ApproverResponse]:
    """Users with the approver role, ordered by last then first name."""
    result = await session.execute(
        select(User)
        .where(col(User.role) == UserRole.APPROVER.value)
        .order_by(col(User.last_name), col(User.first_name), col(User.id))
    )
    return [build_approver_response(u) for u in result.scalars().all()]


async def get_approvers_by_ids(session: AsyncSession, approver_ids: Iterable[int]) -> list[User]:
    """Fetch approver users by id. Raises 400 if any id is not an approver."""
    wanted = set(approver_ids)
    result = await session.execute(
        select(User).where(col(User.id).in_(wanted), col(User.role) == UserRole.APPROVER.value)
    )
    users = list(result.scalars().all())
    unknown = wanted - {persisted_id(u) for u in users}
    if unknown:
        raise AppError(f"Unknown approver ids: {sorted(unknown)}", status_code=400)
    return users
