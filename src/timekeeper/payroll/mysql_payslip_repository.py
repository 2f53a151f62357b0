from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

import mysql.connector

from ..common.datetime_utils import format_db_timestamp, now_local, parse_db_timestamp
from ..core.enums import PayslipStatus
from ..core.exceptions import DuplicatePayslipError, StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import PayrollResult, Payslip, PayslipEdit, PayslipReportRow, quantize2
from .repository import PayslipRepository

_PAYSLIP_COLUMNS = """
    p.id, p.user_id, p.week_start, p.week_end,
    p.total_hours, p.overtime_hours, p.undertime_hours,
    p.base_salary, p.overtime_pay, p.undertime_deduction, p.staff_house_deduction, p.total_salary,
    p.clock_in_time, p.clock_out_time, p.status, p.created_at
"""


def _dec(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _to_payslip(r: dict) -> Payslip:
    return Payslip(
        payslip_id=int(r["id"]),
        user_id=int(r["user_id"]),
        period_start=r["week_start"],
        period_end=r["week_end"],
        result=PayrollResult(
            total_hours=_dec(r["total_hours"]),
            overtime_hours=_dec(r.get("overtime_hours")),
            undertime_hours=_dec(r.get("undertime_hours")),
            base_salary=_dec(r["base_salary"]),
            overtime_pay=_dec(r.get("overtime_pay")),
            undertime_deduction=_dec(r.get("undertime_deduction")),
            staff_house_deduction=_dec(r.get("staff_house_deduction")),
            total_salary=_dec(r["total_salary"]),
            clock_in_time=parse_db_timestamp(r.get("clock_in_time")),
            clock_out_time=parse_db_timestamp(r.get("clock_out_time")),
        ),
        status=PayslipStatus(r.get("status") or PayslipStatus.PENDING.value),
        created_at=r.get("created_at"),
    )


class MySQLPayslipRepository(PayslipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, user_id: int, period_start: date, period_end: date) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PAYSLIP_COLUMNS}
                FROM payslips p
                WHERE p.user_id=%s AND p.week_start=%s AND p.week_end=%s
                """,
                (int(user_id), period_start, period_end),
            )
            r = fetchone(cur)
            return _to_payslip(r) if r else None

    def get_by_id(self, payslip_id: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PAYSLIP_COLUMNS} FROM payslips p WHERE p.id=%s", (int(payslip_id),))
            r = fetchone(cur)
            return _to_payslip(r) if r else None

    def insert(self, *, user_id: int, period_start: date, period_end: date, result: PayrollResult) -> Payslip:
        stored = result.rounded()
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payslips (user_id, week_start, week_end, total_hours, overtime_hours,
                        undertime_hours, base_salary, overtime_pay, undertime_deduction, staff_house_deduction,
                        total_salary, clock_in_time, clock_out_time, status)
                    VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(user_id),
                        period_start,
                        period_end,
                        stored.total_hours,
                        stored.overtime_hours,
                        stored.undertime_hours,
                        stored.base_salary,
                        stored.overtime_pay,
                        stored.undertime_deduction,
                        stored.staff_house_deduction,
                        stored.total_salary,
                        format_db_timestamp(stored.clock_in_time),
                        format_db_timestamp(stored.clock_out_time),
                        PayslipStatus.PENDING.value,
                    ),
                )
                payslip_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicatePayslipError(
                    f"Payslip already exists for user {user_id} ({period_start}..{period_end})"
                ) from exc
            raise StorageError(str(exc)) from exc

        return Payslip(
            payslip_id=payslip_id,
            user_id=int(user_id),
            period_start=period_start,
            period_end=period_end,
            result=stored,
            status=PayslipStatus.PENDING,
            created_at=now_local(),
        )

    def update_fields(self, payslip_id: int, *, edit: PayslipEdit, total_salary: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payslips SET
                    clock_in_time=%s, clock_out_time=%s, total_hours=%s, overtime_hours=%s,
                    undertime_hours=%s, base_salary=%s, overtime_pay=%s, undertime_deduction=%s,
                    staff_house_deduction=%s, total_salary=%s
                WHERE id=%s
                """,
                (
                    format_db_timestamp(edit.clock_in_time),
                    format_db_timestamp(edit.clock_out_time),
                    edit.total_hours,
                    edit.overtime_hours,
                    edit.undertime_hours,
                    edit.base_salary,
                    edit.overtime_pay,
                    edit.undertime_deduction,
                    edit.staff_house_deduction,
                    quantize2(total_salary),
                    int(payslip_id),
                ),
            )
            return cur.rowcount > 0

    def list_for_period(self, period_start: date, period_end: Optional[date] = None) -> Sequence[PayslipReportRow]:
        clauses = ["p.week_start=%s"]
        params: list[object] = [period_start]
        if period_end is not None:
            clauses.append("p.week_end=%s")
            params.append(period_end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PAYSLIP_COLUMNS}, u.username, u.department
                FROM payslips p
                JOIN users u ON u.id = p.user_id
                WHERE {where}
                ORDER BY u.department, u.username
                """,
                tuple(params),
            )
            return [
                PayslipReportRow(payslip=_to_payslip(r), username=r["username"], department=r.get("department"))
                for r in fetchall(cur)
            ]

    def release(self, period_start: date, period_end: date, *, user_ids: Optional[Sequence[int]] = None) -> int:
        clauses = ["week_start=%s", "week_end=%s", "status=%s"]
        params: list[object] = [period_start, period_end, PayslipStatus.PENDING.value]
        if user_ids:
            ids = [int(i) for i in user_ids]
            clauses.append(f"user_id IN ({in_clause(ids)})")
            params.extend(ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payslips SET status=%s WHERE {where}",
                (PayslipStatus.RELEASED.value, *params),
            )
            return int(cur.rowcount)

    def list_released_for_user(self, user_id: int, *, year: int, limit: int) -> Sequence[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PAYSLIP_COLUMNS}
                FROM payslips p
                WHERE p.user_id=%s AND p.status=%s AND YEAR(p.week_start)=%s
                ORDER BY p.week_start DESC
                LIMIT %s
                """,
                (int(user_id), PayslipStatus.RELEASED.value, int(year), int(limit)),
            )
            return [_to_payslip(r) for r in fetchall(cur)]
