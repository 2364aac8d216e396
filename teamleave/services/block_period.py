from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

from sqlalchemy import select
from sqlmodel import col

from teamleave.exceptions import BlockedDateError, NotFoundError
from teamleave.models.enums import AuditAction, AuditEntityType, Role
from teamleave.models.leave import BlockPeriod
from teamleave.schemas.block_period import BlockPeriodListResponse, BlockPeriodResponse
from teamleave.services.audit import model_to_audit_dict, write_audit_log
from teamleave.services.dates import contains, iter_days, overlaps, team_today

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from teamleave.schemas.auth import ActorContext
    from teamleave.schemas.block_period import CreateBlockPeriodRequest

logger = logging.getLogger(__name__)


class BlockedDate(NamedTuple):
    date: date
    reason: str


def _build_block_period_response(period: BlockPeriod) -> BlockPeriodResponse:
    return BlockPeriodResponse(
        id=period.id,
        start_date=period.start_date,
        end_date=period.end_date,
        reason=period.reason,
        created_by=period.created_by,
        created_at=period.created_at,
    )


# ---------------------------------------------------------------------------
# Guard
# ---------------------------------------------------------------------------


def find_blocked_date(start: date, end: date, periods: Iterable[BlockPeriod]) -> BlockedDate | None:
    """Return the earliest candidate day that falls inside a block period, or None.

    Days are scanned in order; within a day, periods are checked by start date.
    """
    candidates = sorted(
        (p for p in periods if overlaps(start, end, p.start_date, p.end_date)),
        key=lambda p: (p.start_date, p.end_date),
    )
    if not candidates:
        return None
    for day in iter_days(start, end):
        for period in candidates:
            if contains(period.start_date, period.end_date, day):
                return BlockedDate(day, period.reason)
    return None


async def fetch_block_periods(
    session: AsyncSession,
    *,
    active_only: bool = True,
    today: date | None = None,
) -> list[BlockPeriod]:
    """List block periods ordered by start date. Active means end_date >= today."""
    query = select(BlockPeriod)
    if active_only:
        query = query.where(col(BlockPeriod.end_date) >= (today or team_today()))
    result = await session.execute(query.order_by(col(BlockPeriod.start_date), col(BlockPeriod.end_date)))
    return list(result.scalars().all())


async def ensure_not_blocked(
    session: AsyncSession,
    start: date,
    end: date,
    today: date | None = None,
) -> None:
    """Raise BlockedDateError if any day of [start, end] is inside an active block period."""
    periods = await fetch_block_periods(session, active_only=True, today=today)
    hit = find_blocked_date(start, end, periods)
    if hit is not None:
        logger.warning("Leave %s..%s rejected: %s is blocked (%s)", start, end, hit.date, hit.reason)
        raise BlockedDateError(hit.date, hit.reason)


# ---------------------------------------------------------------------------
# Management
# ---------------------------------------------------------------------------


async def create_block_period(
    session: AsyncSession,
    actor: ActorContext,
    payload: CreateBlockPeriodRequest,
) -> BlockPeriodResponse:
    """Declare a block period (approver or admin)."""
    actor.require_any(Role.APPROVER, Role.ADMIN, action="manage block periods")

    period = BlockPeriod(
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        created_by=actor.user_id,
    )
    session.add(period)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.BLOCK_PERIOD,
        entity_id=period.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(period),
    )

    await session.commit()
    await session.refresh(period)
    logger.info(
        "Block period %s..%s (%s) created by %s", period.start_date, period.end_date, period.reason, actor.user_id
    )
    return _build_block_period_response(period)


async def list_block_periods(
    session: AsyncSession,
    actor: ActorContext,
    *,
    active_only: bool = True,
    today: date | None = None,
) -> BlockPeriodListResponse:
    """List block periods (approver or admin)."""
    actor.require_any(Role.APPROVER, Role.ADMIN, action="view block periods")
    periods = await fetch_block_periods(session, active_only=active_only, today=today)
    return BlockPeriodListResponse(
        items=[_build_block_period_response(p) for p in periods],
        total=len(periods),
    )


async def delete_block_period(
    session: AsyncSession,
    actor: ActorContext,
    period_id: uuid.UUID,
) -> None:
    """Remove a block period (approver or admin)."""
    actor.require_any(Role.APPROVER, Role.ADMIN, action="manage block periods")

    result = await session.execute(select(BlockPeriod).where(col(BlockPeriod.id) == period_id))
    period = result.scalar_one_or_none()
    if period is None:
        raise NotFoundError("Block period not found", context={"block_period_id": str(period_id)})

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.BLOCK_PERIOD,
        entity_id=period.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(period),
    )

    await session.delete(period)
    await session.commit()
    logger.info("Block period %s deleted by %s", period_id, actor.user_id)
