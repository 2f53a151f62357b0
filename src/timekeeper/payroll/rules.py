from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Mapping, Optional

from ..common.validators import require_non_negative
from ..core import constants
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class PayrollRules:
    """Rates and the fixed shift pattern used by the calculator."""

    hourly_rate: Decimal = Decimal(constants.DEFAULT_HOURLY_RATE)
    overtime_rate: Decimal = Decimal(constants.DEFAULT_OVERTIME_RATE)
    staff_house_weekly: Decimal = Decimal(constants.DEFAULT_STAFF_HOUSE_WEEKLY)
    workweek_days: int = constants.DEFAULT_WORKWEEK_DAYS
    shift_start: time = constants.DEFAULT_SHIFT_START
    shift_end: time = constants.DEFAULT_SHIFT_END
    overtime_grace_minutes: int = constants.DEFAULT_OVERTIME_GRACE_MINUTES

    def __post_init__(self):
        if self.workweek_days <= 0:
            raise ValidationError("workweek_days must be > 0")
        if self.overtime_grace_minutes < 0:
            raise ValidationError("overtime_grace_minutes must be >= 0")
        if self.shift_end <= self.shift_start:
            raise ValidationError("shift_end must be later than shift_start")

    @property
    def overtime_grace(self) -> timedelta:
        return timedelta(minutes=self.overtime_grace_minutes)

    @classmethod
    def from_settings(cls, payroll: Optional[Mapping] = None) -> "PayrollRules":
        """Build rules from a settings ``PAYROLL`` mapping; unknown keys are rejected."""
        payroll = dict(payroll or {})
        known = {f.name for f in fields(cls)}
        unknown = set(payroll) - known
        if unknown:
            raise ValidationError(f"Unknown payroll settings: {', '.join(sorted(unknown))}")

        kwargs: dict = {}
        for key in ("hourly_rate", "overtime_rate", "staff_house_weekly"):
            if key in payroll:
                kwargs[key] = require_non_negative(payroll[key], key)
        for key in ("workweek_days", "overtime_grace_minutes"):
            if key in payroll:
                kwargs[key] = int(require_non_negative(payroll[key], key))
        for key in ("shift_start", "shift_end"):
            if key in payroll:
                kwargs[key] = _as_time(payroll[key], key)
        return cls(**kwargs)


def _as_time(value, field_name: str) -> time:
    if isinstance(value, time):
        return value
    v = str(value).strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} must be HH:MM")
