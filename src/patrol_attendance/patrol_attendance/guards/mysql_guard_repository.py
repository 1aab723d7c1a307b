from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Guard
from .repository import GuardRepository


class MySQLGuardRepository(GuardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_by_user_id(self, user_id: str) -> Optional[Guard]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, name, employee_id, status
                FROM guards
                WHERE user_id=%s AND status='active'
                LIMIT 1
                """,
                (user_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Guard(
                guard_id=str(r["id"]),
                name=r["name"],
                user_id=str(r["user_id"]) if r.get("user_id") else None,
                employee_id=r.get("employee_id"),
                status=r["status"],
            )
