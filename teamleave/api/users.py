# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from teamleave.api.deps import ActorDep
from teamleave.db import SessionDep
from teamleave.schemas.user import (
    CreateUserRequest,
    PasswordResetRequest,
    PasswordResetResponse,
    RoleChangeRequest,
    RolesResponse,
    UserListResponse,
    UserResponse,
)
from teamleave.services import roles as role_service
from teamleave.services import user as user_service

users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: CreateUserRequest,
    session: SessionDep,
    actor: ActorDep,
) -> UserResponse:
    """Provision a team member with initial roles (admin only)."""
    return await user_service.create_user(session, actor, payload)


@users_router.get("", response_model=UserListResponse)
async def list_users(
    session: SessionDep,
    actor: ActorDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> UserListResponse:
    """List team members with their roles (admin only)."""
    return await user_service.list_users(session, actor, offset, limit)


@users_router.get("/me", response_model=UserResponse)
async def get_current_user(
    session: SessionDep,
    actor: ActorDep,
) -> UserResponse:
    """Profile and roles of the acting user."""
    return await user_service.get_user(session, actor.user_id)


@users_router.post("/password-reset", response_model=PasswordResetResponse)
async def send_password_reset(
    payload: PasswordResetRequest,
    session: SessionDep,
    actor: ActorDep,
) -> PasswordResetResponse:
    """Generate a password reset link for a team member (admin only)."""
    return await user_service.send_password_reset(session, actor, payload.email)


@users_router.post("/{user_id}/roles", response_model=RolesResponse)
async def grant_role(
    user_id: uuid.UUID,
    payload: RoleChangeRequest,
    session: SessionDep,
    actor: ActorDep,
) -> RolesResponse:
    """Grant a role to a user (admin only). Idempotent."""
    return await role_service.grant_role(session, actor, user_id, payload.role)


@users_router.delete("/{user_id}/roles/{role}", response_model=RolesResponse)
async def revoke_role(
    user_id: uuid.UUID,
    role: str,
    session: SessionDep,
    actor: ActorDep,
) -> RolesResponse:
    """Remove a role from a user (admin only)."""
    return await role_service.revoke_role(session, actor, user_id, role)
