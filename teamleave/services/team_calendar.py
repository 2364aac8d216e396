from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from teamleave.config import get_settings
from teamleave.exceptions import ValidationError
from teamleave.models.enums import LeaveType
from teamleave.models.profile import Profile
from teamleave.schemas.capacity import CalendarDay, CalendarResponse, DashboardResponse, LeaveOnDay
from teamleave.services.capacity import compute_strength, fetch_approved_leave, get_team_strength
from teamleave.services.dates import iter_days, team_today
from teamleave.services.holiday import holidays_between
from teamleave.services.leave import recent_requests_for_user
from teamleave.services.user import get_profile

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from teamleave.schemas.auth import ActorContext


def initials(full_name: str) -> str:
    """Up to two leading initials, e.g. 'Nur Aisyah Binti Ali' -> 'NA'."""
    letters = [part[0] for part in full_name.split() if part]
    return "".join(letters).upper()[:2] or "?"


async def get_month_calendar(session: AsyncSession, year: int, month: int) -> CalendarResponse:
    """Each day of the month with strength, holiday and who is on approved leave."""
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12", context={"month": month})

    start = date(year, month, 1)
    end = date(year, month, calendar.monthrange(year, month)[1])

    leaves = await fetch_approved_leave(session, start, end)
    strength = compute_strength(leaves, start, end, get_settings().capacity)
    holidays = await holidays_between(session, start, end)

    names: dict[uuid.UUID, str] = {}
    user_ids = {lr.user_id for lr in leaves}
    if user_ids:
        result = await session.execute(
            select(col(Profile.id), col(Profile.full_name)).where(col(Profile.id).in_(user_ids))
        )
        names = {row[0]: row[1] for row in result.all()}

    by_day: dict[date, list[LeaveOnDay]] = defaultdict(list)
    for lr in leaves:
        full_name = names.get(lr.user_id, "User")
        for day in iter_days(max(lr.start_date, start), min(lr.end_date, end)):
            by_day[day].append(
                LeaveOnDay(
                    request_id=lr.id,
                    user_id=lr.user_id,
                    full_name=full_name,
                    initials=initials(full_name),
                    leave_type=LeaveType(lr.leave_type),
                )
            )

    days = [
        CalendarDay(
            date=day,
            strength=strength[day],
            holiday=holidays.get(day),
            leaves=by_day.get(day, []),
        )
        for day in iter_days(start, end)
    ]
    return CalendarResponse(year=year, month=month, days=days)


async def get_dashboard(
    session: AsyncSession,
    actor: ActorContext,
    today: date | None = None,
) -> DashboardResponse:
    """Today's and tomorrow's team strength plus the actor's latest requests."""
    today = today or team_today()
    tomorrow = today + timedelta(days=1)

    profile = await get_profile(session, actor.user_id)
    strength = await get_team_strength(session, today, tomorrow)
    recent = await recent_requests_for_user(session, actor.user_id, limit=5)

    return DashboardResponse(
        full_name=profile.full_name,
        today=strength[today],
        tomorrow=strength[tomorrow],
        recent_requests=recent,
    )
