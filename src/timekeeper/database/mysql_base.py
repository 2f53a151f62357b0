from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StorageError
from ..payroll.period import Period, SelectedDatesPeriod
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, rollback on error.

    Connector errors surface as ``StorageError`` except ``IntegrityError``,
    which repositories translate themselves (duplicate keys are meaningful).
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StorageError(f"Cannot connect to database: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError:
        conn.rollback()
        raise
    except mysql.connector.Error as exc:
        conn.rollback()
        raise StorageError(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_duplicate_key(exc: mysql.connector.Error) -> bool:
    return getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: list) -> str:
    """Placeholder list for ``IN (...)``; callers guarantee ``values`` is non-empty."""
    return ", ".join(["%s"] * len(values))


def period_date_clause(period: Period, column: str) -> tuple[str, list]:
    """SQL condition selecting rows whose ``DATE(column)`` falls inside ``period``."""
    if isinstance(period, SelectedDatesPeriod):
        days = list(period.dates())
        return f"DATE({column}) IN ({in_clause(days)})", days
    return f"DATE({column}) BETWEEN %s AND %s", [period.start, period.end]
