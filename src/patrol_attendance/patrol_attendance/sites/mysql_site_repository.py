from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Site
from .repository import SiteRepository


class MySQLSiteRepository(SiteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, site_id: str) -> Optional[Site]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, code, address, status
                FROM sites
                WHERE id=%s
                """,
                (site_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Site(
                site_id=str(r["id"]),
                name=r["name"],
                code=r.get("code"),
                address=r.get("address"),
                status=r.get("status") or "active",
            )
