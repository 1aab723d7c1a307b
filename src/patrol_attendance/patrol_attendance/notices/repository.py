from __future__ import annotations

from typing import Protocol

from .model import Notice


class NoticeRepository(Protocol):
    def create(self, notice: Notice) -> str:
        raise NotImplementedError
