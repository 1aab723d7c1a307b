from __future__ import annotations

from typing import Optional, Sequence

from ..model import AttendanceRecord
from .base import CheckoutPolicy


class TodayOnlyPolicy(CheckoutPolicy):
    """Checkout only if the open record belongs to today's record set.

    A session opened before midnight and re-scanned after it is a conflict.
    """

    name = "today_only"
    requires_today_records = True

    def select_checkout(
        self,
        *,
        open_record: AttendanceRecord,
        site_id: str,
        today_records: Sequence[AttendanceRecord],
    ) -> Optional[AttendanceRecord]:
        for r in today_records:
            if r.site_id == site_id and r.is_open:
                return r
        return None
