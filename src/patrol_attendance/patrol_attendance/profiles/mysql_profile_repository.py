from __future__ import annotations

from datetime import date
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import EmployeeProfile
from .repository import ProfileRepository

_COLUMNS = "id, full_name, employee_id, is_foreign_employee, work_permit_expiry_date, passport_expiry_date"


def _to_profile(r: dict) -> EmployeeProfile:
    return EmployeeProfile(
        profile_id=str(r["id"]),
        full_name=r["full_name"],
        employee_id=r.get("employee_id"),
        is_foreign_employee=bool(r.get("is_foreign_employee")),
        work_permit_expiry_date=r.get("work_permit_expiry_date"),
        passport_expiry_date=r.get("passport_expiry_date"),
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _query(self, where: str, params: tuple, order_by: str) -> Sequence[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM profiles
                WHERE is_foreign_employee=1 AND {where}
                ORDER BY {order_by} ASC, full_name ASC
                """,
                params,
            )
            return [_to_profile(r) for r in fetchall(cur)]

    def list_work_permits_expiring(self, *, start: date, end: date) -> Sequence[EmployeeProfile]:
        return self._query(
            "work_permit_expiry_date IS NOT NULL AND work_permit_expiry_date BETWEEN %s AND %s",
            (start, end),
            "work_permit_expiry_date",
        )

    def list_passports_expiring(self, *, start: date, end: date) -> Sequence[EmployeeProfile]:
        return self._query(
            "passport_expiry_date IS NOT NULL AND passport_expiry_date BETWEEN %s AND %s",
            (start, end),
            "passport_expiry_date",
        )

    def list_work_permits_expired(self, *, before: date) -> Sequence[EmployeeProfile]:
        return self._query(
            "work_permit_expiry_date IS NOT NULL AND work_permit_expiry_date < %s",
            (before,),
            "work_permit_expiry_date",
        )
