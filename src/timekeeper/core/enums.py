from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    OJT = "ojt"


class PayslipStatus(str, Enum):
    """Payslip release state stored in the database (one-way: PENDING -> RELEASED)."""

    PENDING = "pending"
    RELEASED = "released"


class PeriodKind(str, Enum):
    """Shape of a payroll period."""

    WEEK = "week"
    RANGE = "range"
    DAYS = "days"
