from sqlmodel import SQLModel

from teamleave.models.audit import AuditLog
from teamleave.models.base import TimestampMixin, UUIDBase
from teamleave.models.enums import (
    AuditAction,
    AuditEntityType,
    LeaveStatus,
    LeaveType,
    Role,
    StrengthLabel,
)
from teamleave.models.holiday import PublicHoliday
from teamleave.models.leave import BlockPeriod, LeaveRequest
from teamleave.models.profile import Profile, UserRole

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "BlockPeriod",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "Profile",
    "PublicHoliday",
    "Role",
    "SQLModel",
    "StrengthLabel",
    "TimestampMixin",
    "UUIDBase",
    "UserRole",
]
