from __future__ import annotations

from typing import Optional, Sequence

from ..model import AttendanceRecord
from .base import CheckoutPolicy


class AnyOpenPolicy(CheckoutPolicy):
    """Checkout the open session at this site whatever day it was opened on."""

    name = "any_open"

    def select_checkout(
        self,
        *,
        open_record: AttendanceRecord,
        site_id: str,
        today_records: Sequence[AttendanceRecord],
    ) -> Optional[AttendanceRecord]:
        return open_record if open_record.site_id == site_id else None
