"""Role grants: admin-only add/remove with the at-least-one-role and no-self-demotion invariants."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from teamleave.exceptions import InvalidRoleError, NotFoundError, RoleCountError, SelfDemotionError
from teamleave.models.enums import AuditAction, AuditEntityType, Role
from teamleave.models.profile import Profile, UserRole
from teamleave.schemas.user import RolesResponse
from teamleave.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from teamleave.schemas.auth import ActorContext

logger = logging.getLogger(__name__)


def parse_role(value: str | Role) -> Role:
    """Coerce a role name into the closed Role set."""
    try:
        return Role(value)
    except ValueError:
        valid = ", ".join(r.value for r in Role)
        raise InvalidRoleError(
            f"Invalid role {value!r}. Must be one of: {valid}", context={"role": str(value)}
        ) from None


def _sorted_roles(roles: set[Role]) -> list[Role]:
    order = list(Role)
    return sorted(roles, key=order.index)


async def list_roles(session: AsyncSession, user_id: uuid.UUID) -> set[Role]:
    """Roles currently granted to a user."""
    result = await session.execute(select(col(UserRole.role)).where(col(UserRole.user_id) == user_id))
    return {Role(row[0]) for row in result.all()}


async def _get_profile_for_update(session: AsyncSession, user_id: uuid.UUID) -> Profile:
    """Lock the profile row so role counts cannot change underneath the caller."""
    result = await session.execute(select(Profile).where(col(Profile.id) == user_id).with_for_update())
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError("User not found", context={"user_id": str(user_id)})
    return profile


async def grant_role(
    session: AsyncSession,
    actor: ActorContext,
    target_user_id: uuid.UUID,
    role: str | Role,
) -> RolesResponse:
    """Grant a role. Granting a role the user already holds is a no-op."""
    actor.require_any(Role.ADMIN, action="change roles")
    new_role = parse_role(role)

    await _get_profile_for_update(session, target_user_id)
    current = await list_roles(session, target_user_id)

    if new_role in current:
        return RolesResponse(user_id=target_user_id, roles=_sorted_roles(current))

    grant = UserRole(user_id=target_user_id, role=new_role.value)
    session.add(grant)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.ROLE,
        entity_id=grant.id,
        action=AuditAction.GRANT,
        after_json=model_to_audit_dict(grant),
    )
    await session.commit()

    logger.info("Admin %s granted role %s to user %s", actor.user_id, new_role, target_user_id)
    return RolesResponse(user_id=target_user_id, roles=_sorted_roles(current | {new_role}))


async def revoke_role(
    session: AsyncSession,
    actor: ActorContext,
    target_user_id: uuid.UUID,
    role: str | Role,
) -> RolesResponse:
    """Remove a role, refusing to leave the user role-less or to let an admin demote themselves."""
    actor.require_any(Role.ADMIN, action="change roles")
    old_role = parse_role(role)

    if target_user_id == actor.user_id and old_role is Role.ADMIN:
        logger.warning("Admin %s attempted to remove their own admin role", actor.user_id)
        raise SelfDemotionError("Cannot remove your own admin role", context={"user_id": str(actor.user_id)})

    await _get_profile_for_update(session, target_user_id)

    result = await session.execute(
        select(UserRole).where(col(UserRole.user_id) == target_user_id, col(UserRole.role) == old_role.value)
    )
    grant = result.scalar_one_or_none()
    if grant is None:
        raise NotFoundError(
            f"User does not hold role {old_role.value}",
            context={"user_id": str(target_user_id), "role": old_role.value},
        )

    current = await list_roles(session, target_user_id)
    if len(current) <= 1:
        logger.warning("Refused to remove last role %s from user %s", old_role, target_user_id)
        raise RoleCountError(
            "Cannot remove the last role. User must have at least one role.",
            context={"user_id": str(target_user_id), "role": old_role.value},
        )

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.ROLE,
        entity_id=grant.id,
        action=AuditAction.REVOKE,
        before_json=model_to_audit_dict(grant),
    )
    await session.delete(grant)
    await session.commit()

    logger.info("Admin %s removed role %s from user %s", actor.user_id, old_role, target_user_id)
    return RolesResponse(user_id=target_user_id, roles=_sorted_roles(current - {old_role}))
