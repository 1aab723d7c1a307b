from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..model import AttendanceRecord


class CheckoutPolicy(ABC):
    """Strategy Pattern: decide whether a same-site re-scan is a checkout.

    Only consulted when the guard's open session is at the scanned site.
    Returning None turns the scan into a conflict.
    """

    name: str = ""
    requires_today_records: bool = False

    @abstractmethod
    def select_checkout(
        self,
        *,
        open_record: AttendanceRecord,
        site_id: str,
        today_records: Sequence[AttendanceRecord],
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError
