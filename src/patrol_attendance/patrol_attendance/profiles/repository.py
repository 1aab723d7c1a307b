from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import EmployeeProfile


class ProfileRepository(Protocol):
    """Foreign-employee document queries. All bounds are inclusive."""

    def list_work_permits_expiring(self, *, start: date, end: date) -> Sequence[EmployeeProfile]:
        raise NotImplementedError

    def list_passports_expiring(self, *, start: date, end: date) -> Sequence[EmployeeProfile]:
        raise NotImplementedError

    def list_work_permits_expired(self, *, before: date) -> Sequence[EmployeeProfile]:
        """Work permits with an expiry date strictly before ``before``."""

        raise NotImplementedError
