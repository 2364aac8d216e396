from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from teamleave.config import get_settings
from teamleave.exceptions import ValidationError
from teamleave.models.enums import LeaveStatus, StrengthLabel
from teamleave.models.leave import LeaveRequest
from teamleave.schemas.capacity import CapacityResponse, TeamStrength
from teamleave.services.dates import contains, inclusive_day_count, iter_days

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from teamleave.config import CapacityConfig, StrengthThresholds


def strength_label(available: int, total: int, thresholds: StrengthThresholds) -> StrengthLabel:
    """Band the available/total ratio into a strength label."""
    ratio = available / total if total > 0 else 0.0
    if ratio >= thresholds.full:
        return StrengthLabel.FULL
    if ratio >= thresholds.good:
        return StrengthLabel.GOOD
    if ratio >= thresholds.lean:
        return StrengthLabel.LEAN
    return StrengthLabel.LOW


def compute_strength(
    leaves: Iterable[LeaveRequest],
    start: date,
    end: date,
    config: CapacityConfig,
) -> dict[date, TeamStrength]:
    """Count approved leave per day of [start, end] and derive availability.

    Non-approved requests in ``leaves`` are ignored.
    """
    approved = [lr for lr in leaves if lr.status == LeaveStatus.APPROVED]
    strength: dict[date, TeamStrength] = {}
    for day in iter_days(start, end):
        on_leave = sum(1 for lr in approved if contains(lr.start_date, lr.end_date, day))
        available = config.team_size - on_leave
        strength[day] = TeamStrength(
            date=day,
            available=available,
            total=config.team_size,
            on_leave=on_leave,
            label=strength_label(available, config.team_size, config.thresholds),
        )
    return strength


async def fetch_approved_leave(session: AsyncSession, start: date, end: date) -> list[LeaveRequest]:
    """Approved requests whose range intersects [start, end]."""
    result = await session.execute(
        select(LeaveRequest)
        .where(
            col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
            col(LeaveRequest.start_date) <= end,
            col(LeaveRequest.end_date) >= start,
        )
        .order_by(col(LeaveRequest.start_date), col(LeaveRequest.created_at))
    )
    return list(result.scalars().all())


async def get_team_strength(
    session: AsyncSession,
    start: date,
    end: date | None = None,
    config: CapacityConfig | None = None,
) -> dict[date, TeamStrength]:
    """Team availability for a date, or for each day of a range."""
    end = end or start
    settings = get_settings()
    if inclusive_day_count(start, end) > settings.max_range_days:
        raise ValidationError(
            f"Range exceeds {settings.max_range_days} days",
            context={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
    leaves = await fetch_approved_leave(session, start, end)
    return compute_strength(leaves, start, end, config or settings.capacity)


async def get_capacity(
    session: AsyncSession,
    start: date,
    end: date,
    config: CapacityConfig | None = None,
) -> CapacityResponse:
    strength = await get_team_strength(session, start, end, config)
    return CapacityResponse(start_date=start, end_date=end, days=list(strength.values()))


async def get_strength_for_day(
    session: AsyncSession,
    day: date,
    config: CapacityConfig | None = None,
) -> TeamStrength:
    strength = await get_team_strength(session, day, day, config)
    return strength[day]
