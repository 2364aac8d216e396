# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel

from teamleave.models.enums import LeaveType, StrengthLabel
from teamleave.schemas.leave import LeaveRequestResponse


class TeamStrength(BaseModel):
    """Derived availability for a single day."""

    date: date
    available: int
    total: int
    on_leave: int
    label: StrengthLabel


class CapacityResponse(BaseModel):
    """Team strength for each day of a range, in date order."""

    start_date: date
    end_date: date
    days: list[TeamStrength]


class LeaveOnDay(BaseModel):
    """An approved leave shown on a calendar day."""

    request_id: uuid.UUID
    user_id: uuid.UUID
    full_name: str
    initials: str
    leave_type: LeaveType


class CalendarDay(BaseModel):
    date: date
    strength: TeamStrength
    holiday: str | None = None
    leaves: list[LeaveOnDay]


class CalendarResponse(BaseModel):
    year: int
    month: int
    days: list[CalendarDay]


class DashboardResponse(BaseModel):
    """Landing summary for the current actor."""

    full_name: str
    today: TeamStrength
    tomorrow: TeamStrength
    recent_requests: list[LeaveRequestResponse]
