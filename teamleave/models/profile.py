# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from teamleave.models.base import TimestampMixin, UUIDBase


class Profile(UUIDBase, TimestampMixin, table=True):
    """A team member; the id matches the identity provider's user id."""

    __tablename__ = "profiles"
    __table_args__ = (sa.UniqueConstraint("email", name="uq_profiles_email"),)

    full_name: str = Field(max_length=255)
    email: str = Field(max_length=255)


class UserRole(UUIDBase, TimestampMixin, table=True):
    """A single role grant. Users hold one row per role."""

    __tablename__ = "user_roles"
    __table_args__ = (sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    user_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    role: str = Field(max_length=50)
