from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Site:
    """Domain entity: a patrolled site with a printed check-in QR code."""

    site_id: str
    name: str
    code: Optional[str] = None
    address: Optional[str] = None
    status: str = "active"
