from __future__ import annotations

from typing import Optional, Protocol

from .model import Guard


class GuardRepository(Protocol):
    def get_active_by_user_id(self, user_id: str) -> Optional[Guard]:
        raise NotImplementedError
