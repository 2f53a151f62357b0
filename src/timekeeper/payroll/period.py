"""Payroll periods.

A period is one of three shapes and only ever matters for two things:
the staff-house proration and the (start, end) key a payslip is stored under.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence, Tuple, Union

from ..common.datetime_utils import parse_iso_date
from ..core.constants import WEEK_LENGTH_DAYS
from ..core.enums import PeriodKind
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class WeekPeriod:
    week_start: date

    kind = PeriodKind.WEEK

    @property
    def start(self) -> date:
        return self.week_start

    @property
    def end(self) -> date:
        return self.week_start + timedelta(days=WEEK_LENGTH_DAYS - 1)

    @property
    def day_count(self) -> int:
        return WEEK_LENGTH_DAYS

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def dates(self) -> Tuple[date, ...]:
        return tuple(self.start + timedelta(days=i) for i in range(WEEK_LENGTH_DAYS))


@dataclass(frozen=True)
class DateRangePeriod:
    start_date: date
    end_date: date

    kind = PeriodKind.RANGE

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValidationError("End date must be on or after start date")

    @property
    def start(self) -> date:
        return self.start_date

    @property
    def end(self) -> date:
        return self.end_date

    @property
    def day_count(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def dates(self) -> Tuple[date, ...]:
        return tuple(self.start_date + timedelta(days=i) for i in range(self.day_count))


@dataclass(frozen=True)
class SelectedDatesPeriod:
    """Arbitrary, possibly non-contiguous set of days.

    ``start``/``end`` are the min/max selected day and only serve as the payslip key;
    days in between that were not selected are not part of the period.
    """

    selected: Tuple[date, ...]

    kind = PeriodKind.DAYS

    def __post_init__(self):
        days = tuple(sorted(set(self.selected)))
        if not days:
            raise ValidationError("At least one date must be selected")
        object.__setattr__(self, "selected", days)

    @property
    def start(self) -> date:
        return self.selected[0]

    @property
    def end(self) -> date:
        return self.selected[-1]

    @property
    def day_count(self) -> int:
        return len(self.selected)

    def contains(self, day: date) -> bool:
        return day in self.selected

    def dates(self) -> Tuple[date, ...]:
        return self.selected


Period = Union[WeekPeriod, DateRangePeriod, SelectedDatesPeriod]


def _as_date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def period_from_request(
    *,
    week_start=None,
    start_date=None,
    end_date=None,
    selected_dates: Optional[Sequence] = None,
) -> Period:
    """Build a period from request values.

    Precedence: week_start, then start_date/end_date, then selected_dates.
    ``selected_dates`` may be a list or a comma separated string.
    """
    if week_start:
        return WeekPeriod(_as_date(week_start))

    if start_date or end_date:
        if not (start_date and end_date):
            raise ValidationError("Both startDate and endDate are required")
        return DateRangePeriod(_as_date(start_date), _as_date(end_date))

    if selected_dates:
        if isinstance(selected_dates, str):
            selected_dates = [s for s in selected_dates.split(",") if s.strip()]
        return SelectedDatesPeriod(tuple(_as_date(d) for d in selected_dates))

    raise ValidationError("A period (weekStart, startDate/endDate or selectedDates) is required")
