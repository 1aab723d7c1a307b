from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class EmployeeProfile:
    """Read-only view of the document fields the expiry monitor needs."""

    profile_id: str
    full_name: str
    employee_id: Optional[str]
    is_foreign_employee: bool
    work_permit_expiry_date: Optional[date] = None
    passport_expiry_date: Optional[date] = None
