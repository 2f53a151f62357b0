from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..payroll.period import Period
from .model import ClockedInRow, OvertimeRequestRow, TimeEntry


class TimeEntryRepository(Protocol):
    def entries_for_user_in_period(self, user_id: int, period: Period) -> Sequence[TimeEntry]:
        """Entries whose clock-in date is inside ``period`` (open entries included)."""

        raise NotImplementedError

    def get_active_for_user_and_date(self, user_id: int, work_date: date) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_latest_for_user_and_date(self, user_id: int, work_date: date) -> Optional[TimeEntry]:
        """Most recent entry clocked in on ``work_date``, open or closed."""

        raise NotImplementedError

    def list_clocked_in(self, work_date: date) -> Sequence[ClockedInRow]:
        """Active users with an open entry started on ``work_date``, by department then clock-in."""

        raise NotImplementedError

    def create_clock_in(self, *, user_id: int, clock_in: datetime, work_date: date, week_start: date) -> int:
        raise NotImplementedError

    def update_clock_out(
        self,
        *,
        entry_id: int,
        clock_out: datetime,
        overtime_requested: bool,
        overtime_note: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def list_pending_overtime(self) -> Sequence[OvertimeRequestRow]:
        raise NotImplementedError

    def decide_overtime(self, *, entry_id: int, approved: bool, decided_by: int) -> bool:
        raise NotImplementedError

    def replace_day_entry(
        self,
        *,
        user_id: int,
        work_date: date,
        week_start: date,
        clock_in: datetime,
        clock_out: Optional[datetime],
    ) -> int:
        """Admin time adjustment: delete the day's entries and insert one new entry."""

        raise NotImplementedError
