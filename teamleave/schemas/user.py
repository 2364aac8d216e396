# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from teamleave.models.enums import Role


class CreateUserRequest(BaseModel):
    """Request body for provisioning a team member."""

    id: uuid.UUID | None = None
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    roles: list[Role] = Field(default_factory=lambda: [Role.STAFF], min_length=1)


class RoleChangeRequest(BaseModel):
    # Plain string so unknown roles reach the service and surface as InvalidRoleError.
    role: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class UserResponse(BaseModel):
    """A team member with the roles they hold."""

    id: uuid.UUID
    full_name: str
    email: str
    roles: list[Role]
    created_at: datetime


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int


class RolesResponse(BaseModel):
    user_id: uuid.UUID
    roles: list[Role]


class PasswordResetResponse(BaseModel):
    email: str
    link: str
