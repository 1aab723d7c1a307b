from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

from src.patrol_attendance.patrol_attendance.attendance.model import AnomalyReportRow, AttendanceRecord
from src.patrol_attendance.patrol_attendance.common.datetime_utils import BusinessClock
from src.patrol_attendance.patrol_attendance.core.enums import AttendanceStatus
from src.patrol_attendance.patrol_attendance.core.exceptions import ConcurrentScanError, DuplicateCheckInError
from src.patrol_attendance.patrol_attendance.guards.model import Guard
from src.patrol_attendance.patrol_attendance.profiles.model import EmployeeProfile
from src.patrol_attendance.patrol_attendance.sites.model import Site

NOW = datetime(2026, 3, 10, 9, 0, 0)


class FakeClock(BusinessClock):
    """BusinessClock pinned to a settable instant."""

    def __init__(self, at: datetime = NOW):
        super().__init__()
        object.__setattr__(self, "at", at)

    def now(self) -> datetime:
        return self.at

    def set(self, at: datetime) -> None:
        object.__setattr__(self, "at", at)

    def advance(self, **kwargs) -> None:
        self.set(self.at + timedelta(**kwargs))


class InMemoryAttendance:
    """Mirrors the MySQL constraints: one open session per guard, one row per (guard, site, date)."""

    def __init__(self, site_names: Optional[dict[str, str]] = None, guards: Optional[dict[str, Guard]] = None):
        self.records: dict[str, AttendanceRecord] = {}
        self.site_names = site_names or {}
        self.guards = guards or {}
        self.calls: list[str] = []
        self._seq = 0

    def _named(self, r: AttendanceRecord) -> AttendanceRecord:
        return replace(r, site_name=self.site_names.get(r.site_id))

    def add(self, **kwargs) -> AttendanceRecord:
        """Seed a record directly, bypassing the constraints."""
        self._seq += 1
        kwargs.setdefault("record_id", f"rec-{self._seq}")
        kwargs.setdefault("check_out_time", None)
        kwargs.setdefault("status", AttendanceStatus.CHECKED_IN)
        kwargs.setdefault("work_date", kwargs["check_in_time"].date())
        rec = AttendanceRecord(**kwargs)
        self.records[rec.record_id] = rec
        return rec

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        self.calls.append("get_by_id")
        r = self.records.get(record_id)
        return self._named(r) if r else None

    def find_open_for_guard(self, guard_id: str) -> Optional[AttendanceRecord]:
        self.calls.append("find_open_for_guard")
        items = [r for r in self.records.values() if r.guard_id == guard_id and r.is_open]
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        return self._named(items[0]) if items else None

    def list_for_guard_and_date(self, guard_id: str, work_date: date):
        self.calls.append("list_for_guard_and_date")
        items = [r for r in self.records.values() if r.guard_id == guard_id and r.work_date == work_date]
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        return [self._named(r) for r in items]

    def create_checkin(self, *, guard_id: str, site_id: str, work_date: date, check_in_time: datetime) -> str:
        self.calls.append("create_checkin")
        for r in self.records.values():
            if r.guard_id == guard_id and r.is_open:
                raise ConcurrentScanError("Another check-in for this guard is already open")
        for r in self.records.values():
            if (r.guard_id, r.site_id, r.work_date) == (guard_id, site_id, work_date):
                raise DuplicateCheckInError("Already checked in and out at this site today")
        return self.add(guard_id=guard_id, site_id=site_id, work_date=work_date, check_in_time=check_in_time).record_id

    def _swap(self, record_id: str, **changes) -> bool:
        r = self.records.get(record_id)
        if not r or not r.is_open:
            return False
        self.records[record_id] = replace(r, **changes)
        return True

    def mark_checked_out(self, *, record_id: str, check_out_time: datetime) -> bool:
        self.calls.append("mark_checked_out")
        return self._swap(record_id, check_out_time=check_out_time, status=AttendanceStatus.CHECKED_OUT)

    def close_late(self, *, record_id, check_out_time, reopen_site_id=None, reopen_date=None, reopen_time=None):
        self.calls.append("close_late")
        before = self.records.get(record_id)
        if not self._swap(record_id, check_out_time=check_out_time, status=AttendanceStatus.LATE_CLOSE):
            raise ConcurrentScanError("The previous session was already closed")
        if not reopen_site_id:
            return None
        try:
            return self.create_checkin(
                guard_id=before.guard_id,
                site_id=reopen_site_id,
                work_date=reopen_date,
                check_in_time=reopen_time,
            )
        except DuplicateCheckInError:
            # Rolled back together with the update.
            self.records[record_id] = before
            raise

    def list_stale(self, *, opened_before: datetime):
        self.calls.append("list_stale")
        items = [r for r in self.records.values() if r.is_open and r.check_in_time < opened_before]
        items.sort(key=lambda r: r.check_in_time)
        return [self._named(r) for r in items]

    def mark_auto_closed(self, *, record_id: str, check_out_time: datetime, closed_at: datetime) -> bool:
        self.calls.append("mark_auto_closed")
        return self._swap(
            record_id,
            check_out_time=check_out_time,
            status=AttendanceStatus.SYSTEM_AUTO_CLOSED,
            auto_closed_at=closed_at,
        )

    def list_anomalies(self, *, start_date, end_date, statuses=(AttendanceStatus.SYSTEM_AUTO_CLOSED, AttendanceStatus.LATE_CLOSE)):
        self.calls.append("list_anomalies")
        items = [r for r in self.records.values() if r.status in statuses and start_date <= r.work_date <= end_date]
        items.sort(key=lambda r: (r.work_date, r.check_in_time), reverse=True)
        rows = []
        for r in items:
            guard = self.guards.get(r.guard_id)
            rows.append(
                AnomalyReportRow(
                    record_id=r.record_id,
                    work_date=r.work_date,
                    guard_name=guard.name if guard else None,
                    employee_id=guard.employee_id if guard else None,
                    site_name=self.site_names.get(r.site_id),
                    check_in_time=r.check_in_time,
                    check_out_time=r.check_out_time,
                    status=r.status,
                    auto_closed_at=r.auto_closed_at,
                )
            )
        return rows


class InMemoryGuards:
    def __init__(self, guards: list[Guard]):
        self._guards = guards

    def get_active_by_user_id(self, user_id: str) -> Optional[Guard]:
        for g in self._guards:
            if g.user_id == user_id and g.is_active:
                return g
        return None


class InMemorySites:
    def __init__(self, sites: list[Site]):
        self._sites = {s.site_id: s for s in sites}

    def get_by_id(self, site_id: str) -> Optional[Site]:
        return self._sites.get(site_id)


class InMemoryProfiles:
    def __init__(self, profiles: list[EmployeeProfile]):
        self._profiles = [p for p in profiles if p.is_foreign_employee]

    def list_work_permits_expiring(self, *, start: date, end: date):
        return [p for p in self._profiles if p.work_permit_expiry_date and start <= p.work_permit_expiry_date <= end]

    def list_passports_expiring(self, *, start: date, end: date):
        return [p for p in self._profiles if p.passport_expiry_date and start <= p.passport_expiry_date <= end]

    def list_work_permits_expired(self, *, before: date):
        return [p for p in self._profiles if p.work_permit_expiry_date and p.work_permit_expiry_date < before]


class InMemoryNotices:
    def __init__(self):
        self.created = []

    def create(self, notice) -> str:
        notice_id = f"notice-{len(self.created) + 1}"
        self.created.append(replace(notice, notice_id=notice_id))
        return notice_id


SITE_NAMES = {"site-a": "North Gate", "site-b": "Warehouse 2", "site-c": "Car Park"}

GUARDS = [
    Guard(guard_id="g-1", name="Li Wei", user_id="u-1", employee_id="E001"),
    Guard(guard_id="g-2", name="Chen Jun", user_id="u-2", employee_id="E002"),
    Guard(guard_id="g-9", name="Former Guard", user_id="u-9", employee_id="E009", status="inactive"),
]


SITES = [
    Site(site_id="site-a", name="North Gate", code="NG-01"),
    Site(site_id="site-b", name="Warehouse 2"),
]

