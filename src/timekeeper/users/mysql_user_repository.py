from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, period_date_clause
from ..payroll.period import Period
from .model import UserProfile
from .repository import UserRepository


def _to_profile(row: dict) -> UserProfile:
    return UserProfile(
        user_id=int(row["id"]),
        username=row["username"],
        department=row.get("department"),
        staff_house=bool(row.get("staff_house")),
        active=bool(row.get("active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[UserProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, username, department, staff_house, active
                FROM users
                WHERE id=%s
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def active_users_with_entries_in_period(
        self,
        period: Period,
        *,
        user_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[UserProfile]:
        date_sql, params = period_date_clause(period, "te.clock_in")
        clauses = ["u.active = TRUE", date_sql]

        if user_ids:
            ids = [int(i) for i in user_ids]
            clauses.append(f"u.id IN ({in_clause(ids)})")
            params.extend(ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT DISTINCT u.id, u.username, u.department, u.staff_house, u.active
                FROM users u
                JOIN time_entries te ON te.user_id = u.id
                WHERE {where}
                ORDER BY u.department, u.username
                """,
                tuple(params),
            )
            return [_to_profile(r) for r in fetchall(cur)]
