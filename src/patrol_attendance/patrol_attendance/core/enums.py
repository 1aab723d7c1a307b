from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles as stored by the external auth layer."""

    ADMIN = "admin"
    MANAGER = "manager"
    GUARD = "guard"


class AttendanceStatus(str, Enum):
    """Lifecycle states of a site attendance record."""

    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    SYSTEM_AUTO_CLOSED = "system_auto_closed"
    LATE_CLOSE = "late_close"

    @property
    def is_anomaly(self) -> bool:
        # Closed by a reconciliation path rather than the guard's own scan.
        return self in {AttendanceStatus.SYSTEM_AUTO_CLOSED, AttendanceStatus.LATE_CLOSE}


class ScanAction(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    CONFLICT = "conflict"


class ResolutionAction(str, Enum):
    RESOLVED = "resolved"
    RESOLVED_AND_CHECKED_IN = "resolved_and_checked_in"


class NoticePriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class NoticeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
