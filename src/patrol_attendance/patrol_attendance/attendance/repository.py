from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AnomalyReportRow, AttendanceRecord


class AttendanceRepository(Protocol):
    """Ledger of site attendance records.

    Status-changing updates are compare-and-swap: they only apply while the
    row is still ``checked_in`` and return False otherwise.
    """

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_open_for_guard(self, guard_id: str) -> Optional[AttendanceRecord]:
        """Most recent ``checked_in`` record of the guard at any site."""

        raise NotImplementedError

    def list_for_guard_and_date(self, guard_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(self, *, guard_id: str, site_id: str, work_date: date, check_in_time: datetime) -> str:
        """Insert an open session.

        Raises DuplicateCheckInError when (guard, site, date) already exists and
        ConcurrentScanError when the guard already holds an open session.
        """

        raise NotImplementedError

    def mark_checked_out(self, *, record_id: str, check_out_time: datetime) -> bool:
        raise NotImplementedError

    def close_late(
        self,
        *,
        record_id: str,
        check_out_time: datetime,
        reopen_site_id: Optional[str] = None,
        reopen_date: Optional[date] = None,
        reopen_time: Optional[datetime] = None,
    ) -> Optional[str]:
        """Close a stale session as ``late_close`` and optionally open a new one.

        Both writes happen in one transaction. Returns the new record id when a
        session was reopened, otherwise None. Raises ConcurrentScanError when
        the stale record is no longer open.
        """

        raise NotImplementedError

    def list_stale(self, *, opened_before: datetime) -> Sequence[AttendanceRecord]:
        """Open sessions with ``check_in_time`` strictly before the cutoff."""

        raise NotImplementedError

    def mark_auto_closed(self, *, record_id: str, check_out_time: datetime, closed_at: datetime) -> bool:
        raise NotImplementedError

    def list_anomalies(
        self,
        *,
        start_date: date,
        end_date: date,
        statuses: Sequence[AttendanceStatus] = (AttendanceStatus.SYSTEM_AUTO_CLOSED, AttendanceStatus.LATE_CLOSE),
    ) -> Sequence[AnomalyReportRow]:
        raise NotImplementedError
