from __future__ import annotations

from datetime import date, datetime

import pytest

from src.patrol_attendance.patrol_attendance.attendance.factory import CheckoutPolicyFactory
from src.patrol_attendance.patrol_attendance.attendance.model import AttendanceRecord
from src.patrol_attendance.patrol_attendance.attendance.policies.any_open_policy import AnyOpenPolicy
from src.patrol_attendance.patrol_attendance.attendance.policies.today_only_policy import TodayOnlyPolicy
from src.patrol_attendance.patrol_attendance.core.enums import AttendanceStatus
from src.patrol_attendance.patrol_attendance.core.exceptions import ValidationError


def _open(site_id: str, work_date: date) -> AttendanceRecord:
    return AttendanceRecord(
        record_id="r-1",
        guard_id="g-1",
        site_id=site_id,
        work_date=work_date,
        check_in_time=datetime.combine(work_date, datetime.min.time()).replace(hour=22),
        check_out_time=None,
        status=AttendanceStatus.CHECKED_IN,
    )


def test_factory_defaults_to_today_only():
    f = CheckoutPolicyFactory()
    assert isinstance(f.for_name(None), TodayOnlyPolicy)
    assert isinstance(f.for_name(""), TodayOnlyPolicy)


def test_factory_is_case_insensitive():
    f = CheckoutPolicyFactory()
    assert isinstance(f.for_name(" Any_Open "), AnyOpenPolicy)


def test_factory_rejects_unknown_name():
    with pytest.raises(ValidationError):
        CheckoutPolicyFactory().for_name("latest")


def test_today_only_ignores_yesterdays_open_session():
    rec = _open("site-a", date(2026, 3, 9))

    assert TodayOnlyPolicy().select_checkout(open_record=rec, site_id="site-a", today_records=[]) is None


def test_today_only_matches_todays_open_session():
    rec = _open("site-a", date(2026, 3, 10))

    assert TodayOnlyPolicy().select_checkout(open_record=rec, site_id="site-a", today_records=[rec]) == rec


def test_any_open_matches_across_days():
    rec = _open("site-a", date(2026, 3, 9))

    assert AnyOpenPolicy().select_checkout(open_record=rec, site_id="site-a", today_records=[]) == rec
    assert AnyOpenPolicy().select_checkout(open_record=rec, site_id="site-b", today_records=[]) is None
