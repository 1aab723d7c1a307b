from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import NoticePriority, NoticeStatus


@dataclass(frozen=True)
class Notice:
    """Domain entity: a system notice shown to users with the target roles."""

    title: str
    content: str
    priority: NoticePriority
    start_date: datetime
    end_date: datetime
    target_roles: tuple[str, ...] = field(default_factory=tuple)
    status: NoticeStatus = NoticeStatus.ACTIVE
    notice_id: Optional[str] = None
