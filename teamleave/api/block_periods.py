# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from teamleave.api.deps import ActorDep
from teamleave.db import SessionDep
from teamleave.schemas.block_period import BlockPeriodListResponse, BlockPeriodResponse, CreateBlockPeriodRequest
from teamleave.services import block_period as block_period_service

block_periods_router = APIRouter(prefix="/block-periods", tags=["block-periods"])


@block_periods_router.post("", response_model=BlockPeriodResponse, status_code=status.HTTP_201_CREATED)
async def create_block_period(
    payload: CreateBlockPeriodRequest,
    session: SessionDep,
    actor: ActorDep,
) -> BlockPeriodResponse:
    """Declare a block period (approver or admin)."""
    return await block_period_service.create_block_period(session, actor, payload)


@block_periods_router.get("", response_model=BlockPeriodListResponse)
async def list_block_periods(
    session: SessionDep,
    actor: ActorDep,
    active_only: bool = Query(default=True),
) -> BlockPeriodListResponse:
    """List block periods, by default only those not yet over."""
    return await block_period_service.list_block_periods(session, actor, active_only=active_only)


@block_periods_router.delete("/{period_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_block_period(
    period_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
) -> None:
    """Remove a block period (approver or admin)."""
    await block_period_service.delete_block_period(session, actor, period_id)
