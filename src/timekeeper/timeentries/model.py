from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_db_timestamp


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: one clock-in/clock-out work session.

    ``clock_out`` is None while the session is still open.
    ``overtime_approved`` is tri-state: None pending, True approved, False rejected.
    """

    entry_id: int
    user_id: int
    clock_in: datetime
    clock_out: Optional[datetime]
    work_date: date
    week_start: date
    overtime_requested: bool = False
    overtime_note: Optional[str] = None
    overtime_approved: Optional[bool] = None
    overtime_approved_by: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.clock_out is None

    @property
    def overtime_granted(self) -> bool:
        return bool(self.overtime_requested) and self.overtime_approved is True

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "user_id": self.user_id,
            "clock_in": format_db_timestamp(self.clock_in),
            "clock_out": format_db_timestamp(self.clock_out),
            "date": self.work_date.strftime("%Y-%m-%d"),
            "week_start": self.week_start.strftime("%Y-%m-%d"),
            "overtime_requested": self.overtime_requested,
            "overtime_note": self.overtime_note,
            "overtime_approved": self.overtime_approved,
        }


@dataclass(frozen=True)
class OvertimeRequestRow:
    """Read-model for the admin overtime approval list."""

    entry_id: int
    user_id: int
    username: str
    department: Optional[str]
    clock_in: datetime
    clock_out: Optional[datetime]
    overtime_note: Optional[str]


@dataclass(frozen=True)
class ClockedInRow:
    """Read-model for the live "currently clocked in" list."""

    user_id: int
    username: str
    department: Optional[str]
    clock_in: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "department": self.department,
            "clock_in": format_db_timestamp(self.clock_in),
        }
