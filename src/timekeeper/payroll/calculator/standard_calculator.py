from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from ...common.datetime_utils import at_time_of_day, hours_between
from ...core.enums import PeriodKind
from ...timeentries.model import TimeEntry
from ..model import ZERO, PayrollResult, net_salary
from ..period import Period
from ..rules import PayrollRules
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule set.

    - Every closed entry adds its full worked time to ``total_hours``.
    - Clocking in after shift start adds the lateness to ``undertime_hours``.
    - Only entries with overtime requested *and* approved earn overtime, counted
      from shift end + grace. A late clock-out alone is paid at the base rate.
    - Open entries (no clock-out) are ignored.
    """

    def __init__(self, rules: Optional[PayrollRules] = None):
        self._rules = rules or PayrollRules()

    @property
    def rules(self) -> PayrollRules:
        return self._rules

    def late_hours(self, entry: TimeEntry) -> Decimal:
        shift_start = at_time_of_day(entry.clock_in, self._rules.shift_start)
        if entry.clock_in > shift_start:
            return hours_between(shift_start, entry.clock_in)
        return ZERO

    def overtime_hours(self, entry: TimeEntry) -> Decimal:
        if not entry.overtime_granted or entry.clock_out is None:
            return ZERO

        shift_end = at_time_of_day(entry.clock_in, self._rules.shift_end)
        if entry.clock_out <= shift_end:
            return ZERO

        overtime_start = shift_end + self._rules.overtime_grace
        return max(ZERO, hours_between(overtime_start, entry.clock_out))

    def staff_house_deduction(self, period: Period) -> Decimal:
        weekly = self._rules.staff_house_weekly
        if period.kind == PeriodKind.WEEK:
            return weekly
        # Ranges prorate by calendar days, day-sets by the number of selected days.
        return weekly * Decimal(period.day_count) / Decimal(self._rules.workweek_days)

    def calculate(
        self,
        entries: Iterable[TimeEntry],
        *,
        staff_house: bool,
        period: Period,
    ) -> Optional[PayrollResult]:
        closed = sorted((e for e in entries if e.clock_out is not None), key=lambda e: e.clock_in)
        if not closed:
            return None

        total_hours = ZERO
        overtime_hours = ZERO
        undertime_hours = ZERO
        first_clock_in = closed[0].clock_in
        last_clock_out = closed[0].clock_out

        for entry in closed:
            total_hours += hours_between(entry.clock_in, entry.clock_out)
            undertime_hours += self.late_hours(entry)
            overtime_hours += self.overtime_hours(entry)

            first_clock_in = min(first_clock_in, entry.clock_in)
            last_clock_out = max(last_clock_out, entry.clock_out)

        base_salary = total_hours * self._rules.hourly_rate
        overtime_pay = overtime_hours * self._rules.overtime_rate
        undertime_deduction = undertime_hours * self._rules.hourly_rate
        staff_house_deduction = self.staff_house_deduction(period) if staff_house else ZERO

        return PayrollResult(
            total_hours=total_hours,
            overtime_hours=overtime_hours,
            undertime_hours=undertime_hours,
            base_salary=base_salary,
            overtime_pay=overtime_pay,
            undertime_deduction=undertime_deduction,
            staff_house_deduction=staff_house_deduction,
            total_salary=net_salary(base_salary, overtime_pay, undertime_deduction, staff_house_deduction),
            clock_in_time=first_clock_in,
            clock_out_time=last_clock_out,
        )
