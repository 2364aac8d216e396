# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from teamleave.api.deps import ActorDep
from teamleave.db import SessionDep
from teamleave.models.enums import LeaveStatus
from teamleave.schemas.leave import (
    LeaveRequestListResponse,
    LeaveRequestResponse,
    LeaveTypeInfo,
    SubmitLeavePayload,
)
from teamleave.services import leave as leave_service

leave_requests_router = APIRouter(prefix="/leave-requests", tags=["leave-requests"])
leave_types_router = APIRouter(prefix="/leave-types", tags=["leave-requests"])


@leave_types_router.get("", response_model=list[LeaveTypeInfo])
async def list_leave_types() -> list[LeaveTypeInfo]:
    """List the leave types that can be requested."""
    return leave_service.list_leave_types()


@leave_requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_leave_request(
    payload: SubmitLeavePayload,
    session: SessionDep,
    actor: ActorDep,
) -> LeaveRequestResponse:
    """Submit a leave request for the acting user."""
    return await leave_service.submit_leave_request(session, actor, payload)


@leave_requests_router.get("", response_model=LeaveRequestListResponse)
async def list_leave_requests(
    session: SessionDep,
    actor: ActorDep,
    user_id: uuid.UUID | None = Query(default=None),
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests, optionally only those overlapping [start, end]."""
    overlapping = None
    if start is not None or end is not None:
        overlapping = (start or end, end or start)
    return await leave_service.list_leave_requests(
        session,
        actor,
        user_id=user_id,
        status_filter=status_filter,
        overlapping=overlapping,
        offset=offset,
        limit=limit,
    )


@leave_requests_router.get("/pending", response_model=LeaveRequestListResponse)
async def list_pending_approvals(
    session: SessionDep,
    actor: ActorDep,
) -> LeaveRequestListResponse:
    """Pending requests awaiting review (approver or admin)."""
    return await leave_service.list_pending_approvals(session, actor)


@leave_requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    return await leave_service.get_leave_request(session, actor, request_id)


@leave_requests_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
) -> LeaveRequestResponse:
    """Approve a pending leave request (approver or admin)."""
    return await leave_service.approve_leave_request(session, actor, request_id)


@leave_requests_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
) -> LeaveRequestResponse:
    """Reject a pending leave request (approver or admin)."""
    return await leave_service.reject_leave_request(session, actor, request_id)


@leave_requests_router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
) -> LeaveRequestResponse:
    """Cancel a pending or approved leave request."""
    return await leave_service.cancel_leave_request(session, actor, request_id)
