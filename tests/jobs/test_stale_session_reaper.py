from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.patrol_attendance.patrol_attendance.core.enums import AttendanceStatus
from src.patrol_attendance.patrol_attendance.core.exceptions import JobAbortError, TransientStorageError
from src.patrol_attendance.patrol_attendance.jobs.stale_sessions import StaleSessionReaper

# clock fixture: 2026-03-10 09:00, so the cutoff is 2026-03-09 17:00


def test_closes_sessions_older_than_sixteen_hours(attendance, clock):
    old = attendance.add(guard_id="g-1", site_id="site-a", check_in_time=datetime(2026, 3, 9, 8, 0))
    fresh = attendance.add(guard_id="g-2", site_id="site-b", check_in_time=datetime(2026, 3, 10, 7, 0))

    result = StaleSessionReaper(attendance, clock=clock).run()

    assert result.count == 1
    assert result.to_dict() == {"message": "Auto-closed 1 stale records", "count": 1}
    rec = attendance.records[old.record_id]
    assert rec.status == AttendanceStatus.SYSTEM_AUTO_CLOSED
    assert rec.check_out_time == datetime(2026, 3, 9, 20, 0)
    assert rec.auto_closed_at == clock.now()
    assert attendance.records[fresh.record_id].is_open


def test_cutoff_is_strict(attendance, clock):
    boundary = attendance.add(guard_id="g-1", site_id="site-a", check_in_time=clock.now() - timedelta(hours=16))
    just_past = attendance.add(
        guard_id="g-2",
        site_id="site-a",
        check_in_time=clock.now() - timedelta(hours=16, seconds=1),
    )
    not_yet = attendance.add(
        guard_id="g-3",
        site_id="site-a",
        check_in_time=clock.now() - timedelta(hours=15, minutes=59, seconds=59),
    )

    result = StaleSessionReaper(attendance, clock=clock).run()

    assert result.count == 1
    assert attendance.records[boundary.record_id].is_open
    assert attendance.records[not_yet.record_id].is_open
    assert attendance.records[just_past.record_id].status == AttendanceStatus.SYSTEM_AUTO_CLOSED


def test_nothing_stale(attendance, clock):
    attendance.add(
        guard_id="g-1",
        site_id="site-a",
        check_in_time=datetime(2026, 3, 1, 8, 0),
        check_out_time=datetime(2026, 3, 1, 18, 0),
        status=AttendanceStatus.CHECKED_OUT,
    )

    result = StaleSessionReaper(attendance, clock=clock).run()

    assert result.to_dict() == {"message": "No stale records found", "count": 0}
    assert "mark_auto_closed" not in attendance.calls


def test_second_run_finds_nothing(attendance, clock):
    attendance.add(guard_id="g-1", site_id="site-a", check_in_time=datetime(2026, 3, 8, 8, 0))
    attendance.add(guard_id="g-2", site_id="site-b", check_in_time=datetime(2026, 3, 9, 6, 0))
    reaper = StaleSessionReaper(attendance, clock=clock)

    first = reaper.run()
    second = reaper.run()

    assert first.count == 2
    assert second.count == 0


def test_failed_record_is_skipped_and_others_closed(attendance, clock, monkeypatch):
    bad = attendance.add(guard_id="g-1", site_id="site-a", check_in_time=datetime(2026, 3, 8, 8, 0))
    good = attendance.add(guard_id="g-2", site_id="site-b", check_in_time=datetime(2026, 3, 8, 9, 0))
    real = attendance.mark_auto_closed

    def flaky(*, record_id, check_out_time, closed_at):
        if record_id == bad.record_id:
            raise TransientStorageError("Database error: lock wait timeout")
        return real(record_id=record_id, check_out_time=check_out_time, closed_at=closed_at)

    monkeypatch.setattr(attendance, "mark_auto_closed", flaky)

    result = StaleSessionReaper(attendance, clock=clock).run()

    assert result.count == 1
    assert result.skipped == 1
    assert attendance.records[bad.record_id].is_open
    assert attendance.records[good.record_id].status == AttendanceStatus.SYSTEM_AUTO_CLOSED


def test_record_closed_meanwhile_is_not_counted(attendance, clock, monkeypatch):
    attendance.add(guard_id="g-1", site_id="site-a", check_in_time=datetime(2026, 3, 8, 8, 0))
    monkeypatch.setattr(attendance, "mark_auto_closed", lambda **kwargs: False)

    result = StaleSessionReaper(attendance, clock=clock).run()

    assert result.count == 0
    assert result.skipped == 1


def test_selection_failure_aborts(attendance, clock, monkeypatch):
    def boom(**kwargs):
        raise TransientStorageError("Database error: gone away")

    monkeypatch.setattr(attendance, "list_stale", boom)

    with pytest.raises(JobAbortError):
        StaleSessionReaper(attendance, clock=clock).run()
