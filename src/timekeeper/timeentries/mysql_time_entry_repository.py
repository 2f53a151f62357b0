from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import format_db_timestamp, parse_db_timestamp
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, period_date_clause
from ..payroll.period import Period
from .model import ClockedInRow, OvertimeRequestRow, TimeEntry
from .repository import TimeEntryRepository

_ENTRY_COLUMNS = """
    id, user_id, clock_in, clock_out, date, week_start,
    overtime_requested, overtime_note, overtime_approved, overtime_approved_by
"""


def _optional_bool(value) -> Optional[bool]:
    return None if value is None else bool(value)


def _to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=int(r["id"]),
        user_id=int(r["user_id"]),
        clock_in=parse_db_timestamp(r["clock_in"]),
        clock_out=parse_db_timestamp(r.get("clock_out")),
        work_date=r["date"],
        week_start=r["week_start"],
        overtime_requested=bool(r.get("overtime_requested")),
        overtime_note=r.get("overtime_note"),
        overtime_approved=_optional_bool(r.get("overtime_approved")),
        overtime_approved_by=r.get("overtime_approved_by"),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def entries_for_user_in_period(self, user_id: int, period: Period) -> Sequence[TimeEntry]:
        date_sql, params = period_date_clause(period, "clock_in")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries
                WHERE user_id=%s AND {date_sql}
                ORDER BY clock_in
                """,
                (int(user_id), *params),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def get_active_for_user_and_date(self, user_id: int, work_date: date) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries
                WHERE user_id=%s AND DATE(clock_in)=%s AND clock_out IS NULL
                ORDER BY clock_in DESC
                LIMIT 1
                """,
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def get_latest_for_user_and_date(self, user_id: int, work_date: date) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries
                WHERE user_id=%s AND DATE(clock_in)=%s
                ORDER BY clock_in DESC
                LIMIT 1
                """,
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def list_clocked_in(self, work_date: date) -> Sequence[ClockedInRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.id, u.username, u.department, te.clock_in
                FROM users u
                JOIN time_entries te ON te.user_id = u.id
                WHERE DATE(te.clock_in)=%s AND te.clock_out IS NULL AND u.active = TRUE
                ORDER BY u.department, te.clock_in ASC
                """,
                (work_date,),
            )
            return [
                ClockedInRow(
                    user_id=int(r["id"]),
                    username=r["username"],
                    department=r.get("department"),
                    clock_in=parse_db_timestamp(r["clock_in"]),
                )
                for r in fetchall(cur)
            ]

    def create_clock_in(self, *, user_id: int, clock_in: datetime, work_date: date, week_start: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(user_id, clock_in, date, week_start)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), format_db_timestamp(clock_in), work_date, week_start),
            )
            return int(cur.lastrowid)

    def update_clock_out(
        self,
        *,
        entry_id: int,
        clock_out: datetime,
        overtime_requested: bool,
        overtime_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET clock_out=%s, overtime_requested=%s, overtime_note=%s
                WHERE id=%s AND clock_out IS NULL
                """,
                (format_db_timestamp(clock_out), bool(overtime_requested), overtime_note, int(entry_id)),
            )
            return cur.rowcount > 0

    def list_pending_overtime(self) -> Sequence[OvertimeRequestRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT te.id, te.user_id, u.username, u.department,
                       te.clock_in, te.clock_out, te.overtime_note
                FROM time_entries te
                JOIN users u ON u.id = te.user_id
                WHERE te.overtime_requested = TRUE AND te.overtime_approved IS NULL
                ORDER BY te.created_at DESC
                """
            )
            return [
                OvertimeRequestRow(
                    entry_id=int(r["id"]),
                    user_id=int(r["user_id"]),
                    username=r["username"],
                    department=r.get("department"),
                    clock_in=parse_db_timestamp(r["clock_in"]),
                    clock_out=parse_db_timestamp(r.get("clock_out")),
                    overtime_note=r.get("overtime_note"),
                )
                for r in fetchall(cur)
            ]

    def decide_overtime(self, *, entry_id: int, approved: bool, decided_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET overtime_approved=%s, overtime_approved_by=%s
                WHERE id=%s AND overtime_requested = TRUE
                """,
                (bool(approved), int(decided_by), int(entry_id)),
            )
            return cur.rowcount > 0

    def replace_day_entry(
        self,
        *,
        user_id: int,
        work_date: date,
        week_start: date,
        clock_in: datetime,
        clock_out: Optional[datetime],
    ) -> int:
        # Delete + insert share one transaction.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM time_entries WHERE user_id=%s AND DATE(clock_in)=%s",
                (int(user_id), work_date),
            )
            cur.execute(
                """
                INSERT INTO time_entries(user_id, clock_in, clock_out, date, week_start)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    format_db_timestamp(clock_in),
                    format_db_timestamp(clock_out),
                    work_date,
                    week_start,
                ),
            )
            return int(cur.lastrowid)
