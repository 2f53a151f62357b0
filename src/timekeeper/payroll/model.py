from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional

from ..common.datetime_utils import format_db_timestamp, parse_db_timestamp
from ..common.validators import require_non_negative
from ..core.enums import PayslipStatus
from ..core.exceptions import ValidationError

ZERO = Decimal("0")
CENT = Decimal("0.01")


def quantize2(value: Decimal) -> Decimal:
    """Round to the 2 fractional digits used for stored hours and money."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def net_salary(
    base_salary: Decimal,
    overtime_pay: Decimal,
    undertime_deduction: Decimal,
    staff_house_deduction: Decimal,
) -> Decimal:
    """base + overtime - undertime - staff house. Not floored at zero."""
    return base_salary + overtime_pay - undertime_deduction - staff_house_deduction


@dataclass(frozen=True)
class PayrollResult:
    """Totals of one calculation pass for one user over one period.

    ``clock_in_time``/``clock_out_time`` are the period-wide earliest clock-in
    and latest clock-out, not a single entry's times.
    """

    total_hours: Decimal
    overtime_hours: Decimal
    undertime_hours: Decimal
    base_salary: Decimal
    overtime_pay: Decimal
    undertime_deduction: Decimal
    staff_house_deduction: Decimal
    total_salary: Decimal
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None

    def rounded(self) -> "PayrollResult":
        values = {
            f.name: quantize2(getattr(self, f.name)) if isinstance(getattr(self, f.name), Decimal) else getattr(self, f.name)
            for f in fields(self)
        }
        return PayrollResult(**values)


@dataclass(frozen=True)
class Payslip:
    """A persisted PayrollResult for one (user, period_start, period_end)."""

    payslip_id: int
    user_id: int
    period_start: date
    period_end: date
    result: PayrollResult
    status: PayslipStatus = PayslipStatus.PENDING
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        r = self.result
        return {
            "id": self.payslip_id,
            "user_id": self.user_id,
            "week_start": self.period_start.strftime("%Y-%m-%d"),
            "week_end": self.period_end.strftime("%Y-%m-%d"),
            "total_hours": str(quantize2(r.total_hours)),
            "overtime_hours": str(quantize2(r.overtime_hours)),
            "undertime_hours": str(quantize2(r.undertime_hours)),
            "base_salary": str(quantize2(r.base_salary)),
            "overtime_pay": str(quantize2(r.overtime_pay)),
            "undertime_deduction": str(quantize2(r.undertime_deduction)),
            "staff_house_deduction": str(quantize2(r.staff_house_deduction)),
            "total_salary": str(quantize2(r.total_salary)),
            "clock_in_time": format_db_timestamp(r.clock_in_time),
            "clock_out_time": format_db_timestamp(r.clock_out_time),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class PayslipReportRow:
    """Read-model for the payroll report (payslip joined with user)."""

    payslip: Payslip
    username: str
    department: Optional[str] = None

    def to_dict(self) -> dict:
        out = self.payslip.to_dict()
        out["username"] = self.username
        out["department"] = self.department
        return out


_MONEY_AND_HOURS = (
    "total_hours",
    "overtime_hours",
    "undertime_hours",
    "base_salary",
    "overtime_pay",
    "undertime_deduction",
    "staff_house_deduction",
)

# Keys sent by the payroll report screen.
_CAMEL_CASE_KEYS = {
    "clockIn": "clock_in_time",
    "clockOut": "clock_out_time",
    "totalHours": "total_hours",
    "overtimeHours": "overtime_hours",
    "undertimeHours": "undertime_hours",
    "baseSalary": "base_salary",
    "overtimePay": "overtime_pay",
    "undertimeDeduction": "undertime_deduction",
    "staffHouseDeduction": "staff_house_deduction",
}


@dataclass(frozen=True)
class PayslipEdit:
    """The complete set of manually editable payslip fields.

    No total field: the total is always derived from the components.
    """

    clock_in_time: Optional[datetime]
    clock_out_time: Optional[datetime]
    total_hours: Decimal
    overtime_hours: Decimal
    undertime_hours: Decimal
    base_salary: Decimal
    overtime_pay: Decimal
    undertime_deduction: Decimal
    staff_house_deduction: Decimal

    @property
    def total_salary(self) -> Decimal:
        return net_salary(self.base_salary, self.overtime_pay, self.undertime_deduction, self.staff_house_deduction)

    @classmethod
    def from_mapping(cls, data: Mapping) -> "PayslipEdit":
        """Validate a submitted form/JSON body. Any submitted ``total_salary`` is ignored.

        Keys may be snake_case or the camelCase names used by the report screen
        (``clockIn``, ``totalHours``, ...); snake_case wins when both are present.
        """
        data = {**{_CAMEL_CASE_KEYS[k]: v for k, v in data.items() if k in _CAMEL_CASE_KEYS}, **data}
        values: dict = {name: quantize2(require_non_negative(data.get(name), name)) for name in _MONEY_AND_HOURS}

        for name in ("clock_in_time", "clock_out_time"):
            try:
                values[name] = parse_db_timestamp(data.get(name))
            except ValueError:
                raise ValidationError(f"{name} must be YYYY-MM-DD HH:MM[:SS]")

        if values["clock_in_time"] and values["clock_out_time"] and values["clock_out_time"] < values["clock_in_time"]:
            raise ValidationError("clock_out_time cannot be earlier than clock_in_time")

        return cls(**values)
