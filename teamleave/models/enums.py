from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Kind of time off being requested."""

    ANNUAL = "annual"
    HALF_DAY_AM = "half_day_am"
    HALF_DAY_PM = "half_day_pm"
    SICK = "sick"
    TRAINING = "training"
    MATERNITY = "maternity"
    PATERNITY = "paternity"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Role(enum.StrEnum):
    """Flat role set; a user may hold several at once."""

    STAFF = "staff"
    APPROVER = "approver"
    ADMIN = "admin"


class StrengthLabel(enum.StrEnum):
    """Team-strength band for a day."""

    FULL = "full"
    GOOD = "good"
    LEAN = "lean"
    LOW = "low"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_REQUEST = "LEAVE_REQUEST"
    BLOCK_PERIOD = "BLOCK_PERIOD"
    ROLE = "ROLE"
    PROFILE = "PROFILE"
    HOLIDAY = "HOLIDAY"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    DELETE = "DELETE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    GRANT = "GRANT"
    REVOKE = "REVOKE"
    PASSWORD_RESET = "PASSWORD_RESET"
