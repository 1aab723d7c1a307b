from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import TransientStorageError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor) inside one transaction.

    Commits on success, rolls back on any error. Driver errors surface as
    TransientStorageError; domain errors raised by the caller pass through.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise TransientStorageError(f"Database unavailable: {e.msg}") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        raise TransientStorageError(f"Database error: {e.msg}") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(error: mysql.connector.Error, *, index_name: Optional[str] = None) -> bool:
    """True for ER_DUP_ENTRY, optionally only when ``index_name`` fired."""
    if error.errno != errorcode.ER_DUP_ENTRY:
        return False
    if index_name is None:
        return True
    return index_name in (error.msg or "")

