# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from teamleave.models.base import TimestampMixin, UUIDBase
from teamleave.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """A time-off request for an inclusive range of calendar dates."""

    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.Index("ix_leave_requests_user_status", "user_id", "status"),
        sa.Index("ix_leave_requests_dates", "start_date", "end_date"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_requests_date_order"),
    )

    user_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    leave_type: str = Field(max_length=50)
    start_date: date
    end_date: date
    reason: str | None = None
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    approved_by: uuid.UUID | None = None
    reviewed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    backup_note: str | None = None


class BlockPeriod(UUIDBase, TimestampMixin, table=True):
    """A closed interval during which no leave may be taken."""

    __tablename__ = "block_periods"
    __table_args__ = (sa.CheckConstraint("start_date <= end_date", name="ck_block_periods_date_order"),)

    start_date: date = Field(index=True)
    end_date: date = Field(index=True)
    reason: str = Field(max_length=500)
    created_by: uuid.UUID
