# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, NamedTuple

from sqlalchemy import func, select
from sqlmodel import col

from teamleave.config import get_settings
from teamleave.exceptions import (
    InvalidRangeError,
    InvalidStateError,
    NotFoundError,
    OverlappingRequestError,
    ValidationError,
)
from teamleave.models.enums import AuditAction, AuditEntityType, LeaveStatus, LeaveType, Role
from teamleave.models.leave import LeaveRequest
from teamleave.models.profile import Profile
from teamleave.schemas.leave import LeaveRequestListResponse, LeaveRequestResponse, LeaveTypeInfo
from teamleave.services.audit import model_to_audit_dict, write_audit_log
from teamleave.services.block_period import ensure_not_blocked
from teamleave.services.dates import inclusive_day_count
from teamleave.services.events import LeaveEvent, publish

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from teamleave.schemas.auth import ActorContext
    from teamleave.schemas.leave import SubmitLeavePayload

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)

# Statuses each status may move to. Decided and cancelled requests are final.
_TRANSITIONS: dict[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED}),
    LeaveStatus.APPROVED: frozenset({LeaveStatus.CANCELLED}),
    LeaveStatus.REJECTED: frozenset(),
    LeaveStatus.CANCELLED: frozenset(),
}

LEAVE_TYPES: dict[LeaveType, LeaveTypeInfo] = {
    info.value: info
    for info in (
        LeaveTypeInfo(value=LeaveType.ANNUAL, label="Annual Leave", description="Regular vacation days"),
        LeaveTypeInfo(value=LeaveType.HALF_DAY_AM, label="Half Day (Morning)", description="Morning off (AM)"),
        LeaveTypeInfo(value=LeaveType.HALF_DAY_PM, label="Half Day (Afternoon)", description="Afternoon off (PM)"),
        LeaveTypeInfo(value=LeaveType.SICK, label="Sick Leave", description="When you're not feeling well"),
        LeaveTypeInfo(value=LeaveType.TRAINING, label="Training Leave", description="Learning and development"),
        LeaveTypeInfo(value=LeaveType.MATERNITY, label="Maternity Leave", description="New mother care"),
        LeaveTypeInfo(value=LeaveType.PATERNITY, label="Paternity Leave", description="New father care"),
    )
}


class InitialDecision(NamedTuple):
    status: LeaveStatus
    approved_by: uuid.UUID | None
    reviewed_at: datetime | None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a leave request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        user_id=request.user_id,
        leave_type=LeaveType(request.leave_type),
        start_date=request.start_date,
        end_date=request.end_date,
        days=inclusive_day_count(request.start_date, request.end_date),
        reason=request.reason,
        status=LeaveStatus(request.status),
        approved_by=request.approved_by,
        reviewed_at=request.reviewed_at,
        backup_note=request.backup_note,
        created_at=request.created_at,
    )


def decide_initial_status(actor: ActorContext, now: datetime) -> InitialDecision:
    """Approvers' own requests are approved on submission; everyone else waits for review.

    Admin alone does not confer auto-approval.
    """
    if actor.has_any(Role.APPROVER):
        return InitialDecision(LeaveStatus.APPROVED, actor.user_id, now)
    return InitialDecision(LeaveStatus.PENDING, None, None)


def resolve_backup_note(start: date, end: date, backup_note: str | None) -> str | None:
    """Keep a backup note only for leave longer than the configured threshold."""
    if inclusive_day_count(start, end) <= get_settings().backup_note_min_days:
        return None
    if backup_note is not None and not backup_note.strip():
        return None
    return backup_note


def ensure_transition(request: LeaveRequest, new_status: LeaveStatus) -> None:
    current = LeaveStatus(request.status)
    if new_status not in _TRANSITIONS[current]:
        raise InvalidStateError(
            f"Cannot move a {current.value} request to {new_status.value}",
            context={"request_id": str(request.id), "status": current.value},
        )


async def _get_request_or_404(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    """Fetch a leave request by ID. Raises NotFoundError if absent."""
    result = await session.execute(select(LeaveRequest).where(col(LeaveRequest.id) == request_id))
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Leave request not found", context={"request_id": str(request_id)})
    return request


async def _lock_owner(session: AsyncSession, user_id: uuid.UUID) -> Profile:
    """Lock the owner's profile so overlap checks and inserts are serialized per user."""
    result = await session.execute(select(Profile).where(col(Profile.id) == user_id).with_for_update())
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError("User not found", context={"user_id": str(user_id)})
    return profile


async def _check_own_overlap(
    session: AsyncSession,
    user_id: uuid.UUID,
    start: date,
    end: date,
) -> None:
    """Raise OverlappingRequestError if the user holds an active request on any day of [start, end]."""
    result = await session.execute(
        select(LeaveRequest)
        .where(
            col(LeaveRequest.user_id) == user_id,
            col(LeaveRequest.status).in_([s.value for s in ACTIVE_STATUSES]),
            col(LeaveRequest.start_date) <= end,
            col(LeaveRequest.end_date) >= start,
        )
        .order_by(col(LeaveRequest.start_date))
        .limit(1)
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        logger.warning(
            "Leave %s..%s for user %s overlaps request %s (%s..%s)",
            start,
            end,
            user_id,
            existing.id,
            existing.start_date,
            existing.end_date,
        )
        raise OverlappingRequestError(
            f"You already have a {existing.status} request from {existing.start_date.isoformat()} "
            f"to {existing.end_date.isoformat()}",
            context={
                "conflicting_request_id": str(existing.id),
                "start_date": existing.start_date.isoformat(),
                "end_date": existing.end_date.isoformat(),
                "status": existing.status,
            },
        )


def _publish(request: LeaveRequest, action: AuditAction, actor: ActorContext) -> None:
    publish(
        LeaveEvent(
            request_id=request.id,
            user_id=request.user_id,
            status=LeaveStatus(request.status),
            action=action,
            actor_id=actor.user_id,
        )
    )


async def _transition(
    session: AsyncSession,
    request: LeaveRequest,
    actor: ActorContext,
    new_status: LeaveStatus,
    audit_action: AuditAction,
) -> LeaveRequestResponse:
    """Apply a status change, audit it, commit, and notify listeners."""
    ensure_transition(request, new_status)
    before_dict = model_to_audit_dict(request)

    request.status = new_status.value
    if new_status in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
        request.approved_by = actor.user_id
        request.reviewed_at = datetime.now(UTC)

    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=request.id,
        action=audit_action,
        before_json=before_dict,
        after_json=model_to_audit_dict(request),
    )

    await session.commit()
    await session.refresh(request)
    logger.info("Leave request %s %s by %s", request.id, new_status.value, actor.user_id)
    _publish(request, audit_action, actor)
    return _build_leave_response(request)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def list_leave_types() -> list[LeaveTypeInfo]:
    return list(LEAVE_TYPES.values())


async def submit_leave_request(
    session: AsyncSession,
    actor: ActorContext,
    payload: SubmitLeavePayload,
    today: date | None = None,
) -> LeaveRequestResponse:
    """Submit a leave request for the acting user.

    Flow, stopping at the first failure:
    1. Validate the range.
    2. Reject dates inside an active block period.
    3. Lock the owner and reject overlap with their own pending/approved requests.
    4. Decide the initial status (approvers are auto-approved).
    5. Keep the backup note only for long leave.
    6. Persist, audit, commit, notify.
    """
    # 1. Validate.
    if payload.end_date < payload.start_date:
        raise ValidationError(
            "end_date must not be before start_date",
            context={"start_date": payload.start_date.isoformat(), "end_date": payload.end_date.isoformat()},
        )
    days = inclusive_day_count(payload.start_date, payload.end_date)

    # 2. Block periods.
    await ensure_not_blocked(session, payload.start_date, payload.end_date, today=today)

    # 3. Own overlap.
    await _lock_owner(session, actor.user_id)
    await _check_own_overlap(session, actor.user_id, payload.start_date, payload.end_date)

    # 4. Initial status.
    decision = decide_initial_status(actor, datetime.now(UTC))

    # 5. Backup note.
    backup_note = resolve_backup_note(payload.start_date, payload.end_date, payload.backup_note)

    # 6. Persist.
    leave_request = LeaveRequest(
        user_id=actor.user_id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        status=decision.status.value,
        approved_by=decision.approved_by,
        reviewed_at=decision.reviewed_at,
        backup_note=backup_note,
    )
    session.add(leave_request)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(leave_request),
    )

    await session.commit()
    await session.refresh(leave_request)
    logger.info(
        "User %s submitted %s leave %s..%s (%d days): %s",
        actor.user_id,
        leave_request.leave_type,
        leave_request.start_date,
        leave_request.end_date,
        days,
        leave_request.status,
    )
    _publish(leave_request, AuditAction.SUBMIT, actor)
    return _build_leave_response(leave_request)


async def decide_leave_request(
    session: AsyncSession,
    actor: ActorContext,
    request_id: uuid.UUID,
    new_status: LeaveStatus,
) -> LeaveRequestResponse:
    """Approve or reject a pending request (approver or admin)."""
    if new_status not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
        raise ValidationError(
            f"A review must approve or reject, not {new_status.value}",
            context={"status": new_status.value},
        )
    actor.require_any(Role.APPROVER, Role.ADMIN, action="review leave requests")

    leave_request = await _get_request_or_404(session, request_id)
    if leave_request.status != LeaveStatus.PENDING.value:
        raise InvalidStateError(
            f"Only pending requests can be reviewed; this request is {leave_request.status}",
            context={"request_id": str(leave_request.id), "status": leave_request.status},
        )

    action = AuditAction.APPROVE if new_status is LeaveStatus.APPROVED else AuditAction.REJECT
    return await _transition(session, leave_request, actor, new_status, action)


async def approve_leave_request(
    session: AsyncSession,
    actor: ActorContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    return await decide_leave_request(session, actor, request_id, LeaveStatus.APPROVED)


async def reject_leave_request(
    session: AsyncSession,
    actor: ActorContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    return await decide_leave_request(session, actor, request_id, LeaveStatus.REJECTED)


async def cancel_leave_request(
    session: AsyncSession,
    actor: ActorContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Cancel a pending or approved request.

    The owner can cancel their own request; approvers and admins can cancel any.
    Other staff get the same 404 as for a missing request.
    """
    leave_request = await _get_request_or_404(session, request_id)

    if leave_request.user_id != actor.user_id and not actor.is_reviewer:
        raise NotFoundError("Leave request not found", context={"request_id": str(request_id)})

    return await _transition(session, leave_request, actor, LeaveStatus.CANCELLED, AuditAction.CANCEL)


async def get_leave_request(
    session: AsyncSession,
    actor: ActorContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single request. Staff may only read their own."""
    leave_request = await _get_request_or_404(session, request_id)
    if leave_request.user_id != actor.user_id and not actor.is_reviewer:
        raise NotFoundError("Leave request not found", context={"request_id": str(request_id)})
    return _build_leave_response(leave_request)


async def list_leave_requests(
    session: AsyncSession,
    actor: ActorContext,
    *,
    user_id: uuid.UUID | None = None,
    status_filter: LeaveStatus | None = None,
    overlapping: tuple[date, date] | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List requests with optional filters, newest first.

    Actors without approver or admin rights only ever see their own requests.
    """
    if not actor.is_reviewer:
        user_id = actor.user_id

    base_filters = []
    if user_id is not None:
        base_filters.append(col(LeaveRequest.user_id) == user_id)
    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)
    if overlapping is not None:
        start, end = overlapping
        if start > end:
            raise InvalidRangeError(start, end)
        base_filters.append(col(LeaveRequest.start_date) <= end)
        base_filters.append(col(LeaveRequest.end_date) >= start)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc(), col(LeaveRequest.start_date).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return LeaveRequestListResponse(
        items=[_build_leave_response(r) for r in requests],
        total=total,
    )


async def list_pending_approvals(
    session: AsyncSession,
    actor: ActorContext,
) -> LeaveRequestListResponse:
    """Pending requests awaiting review, oldest first (approver or admin)."""
    actor.require_any(Role.APPROVER, Role.ADMIN, action="review leave requests")
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.status) == LeaveStatus.PENDING.value)
        .order_by(col(LeaveRequest.created_at), col(LeaveRequest.start_date))
    )
    requests = list(result.scalars().all())
    return LeaveRequestListResponse(
        items=[_build_leave_response(r) for r in requests],
        total=len(requests),
    )


async def recent_requests_for_user(
    session: AsyncSession,
    user_id: uuid.UUID,
    limit: int = 5,
) -> list[LeaveRequestResponse]:
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.user_id) == user_id)
        .order_by(col(LeaveRequest.created_at).desc())
        .limit(limit)
    )
    return [_build_leave_response(r) for r in result.scalars().all()]
