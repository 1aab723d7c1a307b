from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Guard:
    """Domain entity: a security guard linked to a login account."""

    guard_id: str
    name: str
    user_id: Optional[str] = None
    employee_id: Optional[str] = None
    status: str = "active"

    @property
    def is_active(self) -> bool:
        return self.status == "active"
