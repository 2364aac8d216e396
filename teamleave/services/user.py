from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from teamleave.exceptions import DuplicateError, NotFoundError
from teamleave.models.enums import AuditAction, AuditEntityType, Role
from teamleave.models.profile import Profile, UserRole
from teamleave.schemas.user import PasswordResetResponse, UserListResponse, UserResponse
from teamleave.services.audit import model_to_audit_dict, write_audit_log
from teamleave.services.identity import get_identity_provider
from teamleave.services.roles import list_roles

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from teamleave.schemas.auth import ActorContext
    from teamleave.schemas.user import CreateUserRequest

logger = logging.getLogger(__name__)


def _build_user_response(profile: Profile, roles: set[Role]) -> UserResponse:
    return UserResponse(
        id=profile.id,
        full_name=profile.full_name,
        email=profile.email,
        roles=sorted(roles, key=list(Role).index),
        created_at=profile.created_at,
    )


async def get_profile(session: AsyncSession, user_id: uuid.UUID) -> Profile:
    """Fetch a profile or raise 404."""
    result = await session.execute(select(Profile).where(col(Profile.id) == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError("User not found", context={"user_id": str(user_id)})
    return profile


async def create_user(
    session: AsyncSession,
    actor: ActorContext,
    payload: CreateUserRequest,
) -> UserResponse:
    """Provision a profile together with its initial roles (admin only)."""
    actor.require_any(Role.ADMIN, action="manage users")

    existing = await session.execute(
        select(func.count()).select_from(Profile).where(func.lower(col(Profile.email)) == payload.email.lower())
    )
    if existing.scalar_one() > 0:
        raise DuplicateError("A user with this email already exists", context={"email": payload.email})

    if payload.id is not None and await session.get(Profile, payload.id) is not None:
        raise DuplicateError("A user with this id already exists", context={"user_id": str(payload.id)})

    profile = Profile(full_name=payload.full_name, email=payload.email)
    if payload.id is not None:
        profile.id = payload.id
    session.add(profile)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise DuplicateError("A user with this email already exists", context={"email": payload.email}) from None

    roles = set(payload.roles)
    for role in roles:
        session.add(UserRole(user_id=profile.id, role=role.value))
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.PROFILE,
        entity_id=profile.id,
        action=AuditAction.CREATE,
        after_json={**model_to_audit_dict(profile), "roles": sorted(r.value for r in roles)},
    )
    await session.commit()
    await session.refresh(profile)

    logger.info("Admin %s provisioned user %s with roles %s", actor.user_id, profile.id, sorted(roles))
    return _build_user_response(profile, roles)


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> UserResponse:
    profile = await get_profile(session, user_id)
    return _build_user_response(profile, await list_roles(session, user_id))


async def list_users(
    session: AsyncSession,
    actor: ActorContext,
    offset: int = 0,
    limit: int = 50,
) -> UserListResponse:
    """List team members with their roles, ordered by name (admin only)."""
    actor.require_any(Role.ADMIN, action="manage users")

    count_result = await session.execute(select(func.count()).select_from(Profile))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Profile).order_by(col(Profile.full_name), col(Profile.email)).offset(offset).limit(limit)
    )
    profiles = list(result.scalars().all())

    roles_by_user: dict[uuid.UUID, set[Role]] = defaultdict(set)
    if profiles:
        role_rows = await session.execute(
            select(col(UserRole.user_id), col(UserRole.role)).where(
                col(UserRole.user_id).in_([p.id for p in profiles])
            )
        )
        for user_id, role in role_rows.all():
            roles_by_user[user_id].add(Role(role))

    return UserListResponse(
        items=[_build_user_response(p, roles_by_user[p.id]) for p in profiles],
        total=total,
    )


async def send_password_reset(
    session: AsyncSession,
    actor: ActorContext,
    email: str,
) -> PasswordResetResponse:
    """Generate a password reset link for a team member (admin only)."""
    actor.require_any(Role.ADMIN, action="reset passwords")

    result = await session.execute(select(Profile).where(func.lower(col(Profile.email)) == email.lower()))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError("No user with this email", context={"email": email})

    link = await get_identity_provider().generate_password_reset_link(profile.email)

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.PROFILE,
        entity_id=profile.id,
        action=AuditAction.PASSWORD_RESET,
    )
    await session.commit()

    logger.info("Admin %s issued a password reset link for user %s", actor.user_id, profile.id)
    return PasswordResetResponse(email=profile.email, link=link)
