from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import mysql.connector
import pytest
from mysql.connector import errorcode

from timekeeper.core.enums import PayslipStatus
from timekeeper.core.exceptions import DuplicatePayslipError, StorageError
from timekeeper.payroll.model import PayrollResult
from timekeeper.payroll.mysql_payslip_repository import MySQLPayslipRepository


class FakeCursor:
    def __init__(self, error=None):
        self.error = error
        self.executed = []
        self.lastrowid = 41
        self.closed = False

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self, error=None):
        self.cursor = FakeCursor(error)
        self.conn = FakeConnection(self.cursor)

    def connect(self, *, with_database=True):
        return self.conn


def _result():
    return PayrollResult(
        total_hours=Decimal("8.333333"),
        overtime_hours=Decimal("0"),
        undertime_hours=Decimal("0"),
        base_salary=Decimal("208.333325"),
        overtime_pay=Decimal("0"),
        undertime_deduction=Decimal("0"),
        staff_house_deduction=Decimal("0"),
        total_salary=Decimal("208.333325"),
        clock_in_time=datetime(2026, 2, 2, 7, 0),
        clock_out_time=datetime(2026, 2, 2, 15, 20),
    )


def _insert(factory):
    return MySQLPayslipRepository(factory).insert(
        user_id=1, period_start=date(2026, 2, 1), period_end=date(2026, 2, 7), result=_result()
    )


def test_insert_stores_rounded_values_and_commits():
    factory = FakeConnectionFactory()

    payslip = _insert(factory)

    assert payslip.payslip_id == 41
    assert payslip.status == PayslipStatus.PENDING
    assert payslip.result.total_hours == Decimal("8.33")
    _, params = factory.cursor.executed[0]
    assert params[3] == Decimal("8.33")
    assert params[11] == "2026-02-02 07:00:00"
    assert factory.conn.committed and factory.conn.closed


def test_duplicate_key_becomes_duplicate_payslip_error():
    factory = FakeConnectionFactory(mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY))

    with pytest.raises(DuplicatePayslipError):
        _insert(factory)

    assert factory.conn.rolled_back
    assert not factory.conn.committed
    assert factory.cursor.closed and factory.conn.closed


def test_other_integrity_errors_become_storage_error():
    factory = FakeConnectionFactory(
        mysql.connector.IntegrityError(msg="Cannot add or update a child row", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    )

    with pytest.raises(StorageError) as excinfo:
        _insert(factory)

    assert not isinstance(excinfo.value, DuplicatePayslipError)
    assert factory.conn.rolled_back


def test_out_of_range_value_becomes_storage_error():
    factory = FakeConnectionFactory(
        mysql.connector.DataError(msg="Out of range value for column 'total_hours'", errno=errorcode.ER_WARN_DATA_OUT_OF_RANGE)
    )

    with pytest.raises(StorageError):
        _insert(factory)

    assert factory.conn.rolled_back
