"""Unit tests for request schemas, the actor context and settings."""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from pydantic import ValidationError

from teamleave.config import Settings
from teamleave.exceptions import PermissionDeniedError
from teamleave.models.enums import LeaveType, Role
from teamleave.schemas.auth import ActorContext, actor_has_any
from teamleave.schemas.block_period import CreateBlockPeriodRequest
from teamleave.schemas.leave import SubmitLeavePayload
from teamleave.schemas.user import CreateUserRequest, PasswordResetRequest

# ---------------------------------------------------------------------------
# SubmitLeavePayload
# ---------------------------------------------------------------------------


def test_submit_payload_valid() -> None:
    payload = SubmitLeavePayload(leave_type="half_day_am", start_date="2025-06-01", end_date="2025-06-01")
    assert payload.leave_type == LeaveType.HALF_DAY_AM
    assert payload.start_date == date(2025, 6, 1)
    assert payload.reason is None
    assert payload.backup_note is None


def test_submit_payload_rejects_reversed_dates() -> None:
    with pytest.raises(ValidationError, match="end_date must not be before start_date"):
        SubmitLeavePayload(leave_type=LeaveType.ANNUAL, start_date=date(2025, 6, 2), end_date=date(2025, 6, 1))


def test_submit_payload_rejects_unknown_type() -> None:
    with pytest.raises(ValidationError):
        SubmitLeavePayload(leave_type="sabbatical", start_date=date(2025, 6, 1), end_date=date(2025, 6, 1))


def test_submit_payload_requires_dates() -> None:
    with pytest.raises(ValidationError):
        SubmitLeavePayload.model_validate({"leave_type": "annual", "start_date": "2025-06-01"})


# ---------------------------------------------------------------------------
# CreateBlockPeriodRequest
# ---------------------------------------------------------------------------


def test_block_period_single_day() -> None:
    request = CreateBlockPeriodRequest(start_date=date(2025, 3, 21), end_date=date(2025, 3, 21), reason="Raya")
    assert request.start_date == request.end_date


def test_block_period_rejects_reversed_dates() -> None:
    with pytest.raises(ValidationError):
        CreateBlockPeriodRequest(start_date=date(2025, 3, 22), end_date=date(2025, 3, 21), reason="Raya")


def test_block_period_rejects_blank_reason() -> None:
    with pytest.raises(ValidationError):
        CreateBlockPeriodRequest(start_date=date(2025, 3, 21), end_date=date(2025, 3, 21), reason="")


# ---------------------------------------------------------------------------
# CreateUserRequest
# ---------------------------------------------------------------------------


def test_create_user_defaults_to_staff() -> None:
    request = CreateUserRequest(full_name="Lee", email="lee@example.com")
    assert request.roles == [Role.STAFF]
    assert request.id is None


def test_create_user_rejects_empty_roles() -> None:
    with pytest.raises(ValidationError):
        CreateUserRequest(full_name="Lee", email="lee@example.com", roles=[])


def test_create_user_rejects_unknown_role() -> None:
    with pytest.raises(ValidationError):
        CreateUserRequest(full_name="Lee", email="lee@example.com", roles=["manager"])


@pytest.mark.parametrize("email", ["lee at example", "a@b", "foo@.", "<script>@x", "x@y@"])
def test_create_user_rejects_bad_email(email: str) -> None:
    with pytest.raises(ValidationError):
        CreateUserRequest(full_name="Lee", email=email)


def test_password_reset_request_rejects_bad_email() -> None:
    with pytest.raises(ValidationError):
        PasswordResetRequest(email="siti@")
    assert PasswordResetRequest(email="siti@example.com").email == "siti@example.com"


# ---------------------------------------------------------------------------
# ActorContext
# ---------------------------------------------------------------------------


def test_actor_has_any() -> None:
    assert actor_has_any({Role.STAFF, Role.APPROVER}, [Role.APPROVER, Role.ADMIN])
    assert not actor_has_any({Role.STAFF}, [Role.APPROVER, Role.ADMIN])
    assert not actor_has_any(set(), [Role.STAFF])


def test_actor_require_any() -> None:
    actor = ActorContext(user_id=uuid.uuid4(), roles=frozenset({Role.STAFF}))
    actor.require_any(Role.STAFF)

    with pytest.raises(PermissionDeniedError) as exc_info:
        actor.require_any(Role.APPROVER, Role.ADMIN, action="review leave requests")
    assert exc_info.value.status_code == 403
    assert exc_info.value.context == {"required_roles": ["approver", "admin"]}
    assert "review leave requests" in exc_info.value.message


@pytest.mark.parametrize(
    ("roles", "expected"),
    [
        ({Role.STAFF}, False),
        ({Role.APPROVER}, True),
        ({Role.ADMIN}, True),
        ({Role.STAFF, Role.ADMIN}, True),
    ],
)
def test_actor_is_reviewer(roles: set[Role], expected: bool) -> None:
    assert ActorContext(user_id=uuid.uuid4(), roles=frozenset(roles)).is_reviewer is expected


def test_actor_context_is_frozen() -> None:
    actor = ActorContext(user_id=uuid.uuid4(), roles=frozenset({Role.STAFF}))
    with pytest.raises(ValidationError):
        actor.roles = frozenset({Role.ADMIN})  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def test_settings_defaults() -> None:
    settings = Settings(_env_file=None)  # type: ignore[call-arg]
    assert settings.team_size == 10
    assert settings.backup_note_min_days == 4
    assert settings.capacity.team_size == 10
    assert (settings.strength_thresholds.full, settings.strength_thresholds.good) == (0.80, 0.60)


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEAM_SIZE", "12")
    monkeypatch.setenv("STRENGTH_THRESHOLDS__FULL", "0.9")
    settings = Settings(_env_file=None)  # type: ignore[call-arg]
    assert settings.capacity.team_size == 12
    assert settings.capacity.thresholds.full == 0.9
    assert settings.capacity.thresholds.lean == 0.40


def test_settings_rejects_non_positive_team_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEAM_SIZE", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)  # type: ignore[call-arg]
