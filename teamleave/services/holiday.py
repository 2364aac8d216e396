from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import extract, func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from teamleave.exceptions import DuplicateError, NotFoundError
from teamleave.models.enums import AuditAction, AuditEntityType, Role
from teamleave.models.holiday import PublicHoliday
from teamleave.schemas.holiday import HolidayListResponse, HolidayResponse
from teamleave.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from teamleave.schemas.auth import ActorContext
    from teamleave.schemas.holiday import CreateHolidayRequest

logger = logging.getLogger(__name__)


def _build_holiday_response(holiday: PublicHoliday) -> HolidayResponse:
    return HolidayResponse(
        id=holiday.id,
        date=holiday.date,
        name=holiday.name,
    )


async def create_holiday(
    session: AsyncSession,
    actor: ActorContext,
    payload: CreateHolidayRequest,
) -> HolidayResponse:
    """Create a public holiday (admin only)."""
    actor.require_any(Role.ADMIN, action="manage holidays")

    existing = await session.execute(select(PublicHoliday).where(col(PublicHoliday.date) == payload.date))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateError("Holiday already exists for this date", context={"date": payload.date.isoformat()})

    holiday = PublicHoliday(date=payload.date, name=payload.name)
    session.add(holiday)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise DuplicateError(
            "Holiday already exists for this date", context={"date": payload.date.isoformat()}
        ) from None

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(holiday),
    )

    await session.commit()
    await session.refresh(holiday)
    logger.info("Holiday %s (%s) created by %s", holiday.date, holiday.name, actor.user_id)
    return _build_holiday_response(holiday)


async def list_holidays(
    session: AsyncSession,
    year: int | None = None,
    offset: int = 0,
    limit: int = 50,
) -> HolidayListResponse:
    """List public holidays with optional year filter."""
    base_filter = []

    if year is not None:
        base_filter.append(extract("year", col(PublicHoliday.date)) == year)

    count_result = await session.execute(select(func.count()).select_from(PublicHoliday).where(*base_filter))
    total = count_result.scalar_one()

    result = await session.execute(
        select(PublicHoliday).where(*base_filter).order_by(col(PublicHoliday.date)).offset(offset).limit(limit)
    )
    holidays = list(result.scalars().all())

    return HolidayListResponse(
        items=[_build_holiday_response(h) for h in holidays],
        total=total,
    )


async def holidays_between(session: AsyncSession, start: date, end: date) -> dict[date, str]:
    """Map each holiday date in [start, end] to its name."""
    result = await session.execute(
        select(col(PublicHoliday.date), col(PublicHoliday.name)).where(
            col(PublicHoliday.date) >= start,
            col(PublicHoliday.date) <= end,
        )
    )
    return {row[0]: row[1] for row in result.all()}


async def delete_holiday(
    session: AsyncSession,
    actor: ActorContext,
    holiday_id: uuid.UUID,
) -> None:
    """Delete a public holiday (admin only)."""
    actor.require_any(Role.ADMIN, action="manage holidays")

    result = await session.execute(select(PublicHoliday).where(col(PublicHoliday.id) == holiday_id))
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise NotFoundError("Holiday not found", context={"holiday_id": str(holiday_id)})

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(holiday),
    )

    await session.delete(holiday)
    await session.commit()
