from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrentScanError, DuplicateCheckInError, InvalidCodeError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..scan.codes import INVALID_CODE_MESSAGE
from .model import AnomalyReportRow, AttendanceRecord
from .repository import AttendanceRepository

OPEN_SESSION_INDEX = "uq_site_attendance_open_guard"

_RECORD_COLUMNS = """
    sa.id, sa.guard_id, sa.site_id, sa.date, sa.check_in_time, sa.check_out_time,
    sa.status, sa.auto_closed_at, s.name AS site_name
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=str(r["id"]),
        guard_id=str(r["guard_id"]),
        site_id=str(r["site_id"]),
        work_date=r["date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        auto_closed_at=r.get("auto_closed_at"),
        site_name=r.get("site_name"),
    )


def _insert_checkin(cur, *, guard_id: str, site_id: str, work_date: date, check_in_time: datetime) -> str:
    record_id = str(uuid.uuid4())
    try:
        cur.execute(
            """
            INSERT INTO site_attendance(id, guard_id, site_id, date, check_in_time, status)
            VALUES(%s,%s,%s,%s,%s,%s)
            """,
            (record_id, guard_id, site_id, work_date, check_in_time, AttendanceStatus.CHECKED_IN.value),
        )
    except mysql.connector.IntegrityError as e:
        if is_duplicate_key(e, index_name=OPEN_SESSION_INDEX):
            raise ConcurrentScanError("Another check-in for this guard is already open") from e
        if is_duplicate_key(e):
            raise DuplicateCheckInError("Already checked in and out at this site today") from e
        if e.errno == errorcode.ER_NO_REFERENCED_ROW_2:
            # Site id from the QR code is not in the sites table.
            raise InvalidCodeError(INVALID_CODE_MESSAGE) from e
        raise
    return record_id


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM site_attendance sa
                LEFT JOIN sites s ON s.id = sa.site_id
                WHERE sa.id=%s
                """,
                (record_id,),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_open_for_guard(self, guard_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM site_attendance sa
                LEFT JOIN sites s ON s.id = sa.site_id
                WHERE sa.guard_id=%s AND sa.status=%s
                ORDER BY sa.check_in_time DESC
                LIMIT 1
                """,
                (guard_id, AttendanceStatus.CHECKED_IN.value),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_guard_and_date(self, guard_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM site_attendance sa
                LEFT JOIN sites s ON s.id = sa.site_id
                WHERE sa.guard_id=%s AND sa.date=%s
                ORDER BY sa.check_in_time DESC
                """,
                (guard_id, work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(self, *, guard_id: str, site_id: str, work_date: date, check_in_time: datetime) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            return _insert_checkin(
                cur,
                guard_id=guard_id,
                site_id=site_id,
                work_date=work_date,
                check_in_time=check_in_time,
            )

    def mark_checked_out(self, *, record_id: str, check_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE site_attendance
                SET check_out_time=%s, status=%s
                WHERE id=%s AND status=%s
                """,
                (check_out_time, AttendanceStatus.CHECKED_OUT.value, record_id, AttendanceStatus.CHECKED_IN.value),
            )
            return cur.rowcount > 0

    def close_late(
        self,
        *,
        record_id: str,
        check_out_time: datetime,
        reopen_site_id: Optional[str] = None,
        reopen_date: Optional[date] = None,
        reopen_time: Optional[datetime] = None,
    ) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE site_attendance
                SET check_out_time=%s, status=%s
                WHERE id=%s AND status=%s
                """,
                (check_out_time, AttendanceStatus.LATE_CLOSE.value, record_id, AttendanceStatus.CHECKED_IN.value),
            )
            if cur.rowcount == 0:
                raise ConcurrentScanError("The previous session was already closed")

            if not reopen_site_id:
                return None

            cur.execute("SELECT guard_id FROM site_attendance WHERE id=%s", (record_id,))
            row = fetchone(cur)
            return _insert_checkin(
                cur,
                guard_id=str(row["guard_id"]),
                site_id=reopen_site_id,
                work_date=reopen_date,
                check_in_time=reopen_time,
            )

    def list_stale(self, *, opened_before: datetime) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM site_attendance sa
                LEFT JOIN sites s ON s.id = sa.site_id
                WHERE sa.status=%s AND sa.check_in_time < %s
                ORDER BY sa.check_in_time ASC
                """,
                (AttendanceStatus.CHECKED_IN.value, opened_before),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def mark_auto_closed(self, *, record_id: str, check_out_time: datetime, closed_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE site_attendance
                SET status=%s, check_out_time=%s, auto_closed_at=%s
                WHERE id=%s AND status=%s
                """,
                (
                    AttendanceStatus.SYSTEM_AUTO_CLOSED.value,
                    check_out_time,
                    closed_at,
                    record_id,
                    AttendanceStatus.CHECKED_IN.value,
                ),
            )
            return cur.rowcount > 0

    def list_anomalies(
        self,
        *,
        start_date: date,
        end_date: date,
        statuses: Sequence[AttendanceStatus] = (AttendanceStatus.SYSTEM_AUTO_CLOSED, AttendanceStatus.LATE_CLOSE),
    ) -> Sequence[AnomalyReportRow]:
        if not statuses:
            return []
        placeholders = ",".join(["%s"] * len(statuses))
        params: list[object] = [s.value for s in statuses]
        params.extend([start_date, end_date])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    sa.id, sa.date, sa.check_in_time, sa.check_out_time, sa.status, sa.auto_closed_at,
                    g.name AS guard_name, g.employee_id,
                    s.name AS site_name
                FROM site_attendance sa
                LEFT JOIN guards g ON g.id = sa.guard_id
                LEFT JOIN sites s ON s.id = sa.site_id
                WHERE sa.status IN ({placeholders}) AND sa.date BETWEEN %s AND %s
                ORDER BY sa.date DESC, sa.check_in_time DESC
                """,
                tuple(params),
            )
            return [
                AnomalyReportRow(
                    record_id=str(r["id"]),
                    work_date=r["date"],
                    guard_name=r.get("guard_name"),
                    employee_id=r.get("employee_id"),
                    site_name=r.get("site_name"),
                    check_in_time=r["check_in_time"],
                    check_out_time=r.get("check_out_time"),
                    status=AttendanceStatus(r["status"]),
                    auto_closed_at=r.get("auto_closed_at"),
                )
                for r in fetchall(cur)
            ]
