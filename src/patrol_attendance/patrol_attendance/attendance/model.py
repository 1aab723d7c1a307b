from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one guard's session at one site for one business day."""

    record_id: str
    guard_id: str
    site_id: str
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    auto_closed_at: Optional[datetime] = None
    site_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status == AttendanceStatus.CHECKED_IN


@dataclass(frozen=True)
class AnomalyReportRow:
    """Read-model for the reconciliation review report."""

    record_id: str
    work_date: date
    guard_name: Optional[str]
    employee_id: Optional[str]
    site_name: Optional[str]
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    auto_closed_at: Optional[datetime] = None
