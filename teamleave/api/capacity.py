# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Path, Query

from teamleave.api.deps import ActorDep
from teamleave.db import SessionDep
from teamleave.schemas.capacity import CalendarResponse, CapacityResponse, DashboardResponse
from teamleave.services import capacity as capacity_service
from teamleave.services import team_calendar as calendar_service

capacity_router = APIRouter(tags=["capacity"])


@capacity_router.get("/capacity", response_model=CapacityResponse)
async def get_capacity(
    session: SessionDep,
    actor: ActorDep,
    start: date = Query(),
    end: date | None = Query(default=None),
) -> CapacityResponse:
    """Team strength for a day, or for each day of a range."""
    return await capacity_service.get_capacity(session, start, end or start)


@capacity_router.get("/calendar/{year}/{month}", response_model=CalendarResponse)
async def get_month_calendar(
    session: SessionDep,
    actor: ActorDep,
    year: int = Path(ge=1970, le=9999),
    month: int = Path(ge=1, le=12),
) -> CalendarResponse:
    """Month view of approved leave, holidays and team strength."""
    return await calendar_service.get_month_calendar(session, year, month)


@capacity_router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    session: SessionDep,
    actor: ActorDep,
) -> DashboardResponse:
    """Today's and tomorrow's team strength with the actor's recent requests."""
    return await calendar_service.get_dashboard(session, actor)
