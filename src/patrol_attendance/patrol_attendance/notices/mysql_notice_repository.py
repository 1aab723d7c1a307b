from __future__ import annotations

import json
import uuid

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import Notice
from .repository import NoticeRepository


class MySQLNoticeRepository(NoticeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, notice: Notice) -> str:
        notice_id = notice.notice_id or str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notices(id, title, content, priority, status, target_roles, start_date, end_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    notice_id,
                    notice.title,
                    notice.content,
                    notice.priority.value,
                    notice.status.value,
                    json.dumps(list(notice.target_roles)),
                    notice.start_date,
                    notice.end_date,
                ),
            )
        return notice_id
