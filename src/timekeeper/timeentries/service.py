from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.datetime_utils import at_time_of_day, now_local, week_start_for
from ..core.exceptions import NotFoundError, UserNotFoundError, ValidationError
from ..payroll.rules import PayrollRules
from ..users.repository import UserRepository
from .model import ClockedInRow, OvertimeRequestRow, TimeEntry
from .repository import TimeEntryRepository

logger = logging.getLogger(__name__)


class TimeTrackingService:
    """Clock-in/clock-out and the overtime approval workflow."""

    def __init__(
        self,
        entries: TimeEntryRepository,
        users: UserRepository,
        *,
        rules: Optional[PayrollRules] = None,
    ):
        self._entries = entries
        self._users = users
        self._rules = rules or PayrollRules()

    def _require_user(self, user_id: int):
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise UserNotFoundError(f"User {user_id} does not exist")
        return user

    def clock_in(self, user_id: int, *, now: Optional[datetime] = None) -> int:
        now = (now or now_local()).replace(microsecond=0)
        today = now.date()

        user = self._require_user(user_id)
        if not user.active:
            raise ValidationError("User is inactive")

        if self._entries.get_active_for_user_and_date(int(user_id), today):
            raise ValidationError("Already clocked in today")

        entry_id = self._entries.create_clock_in(
            user_id=int(user_id),
            clock_in=now,
            work_date=today,
            week_start=week_start_for(today),
        )
        logger.info("User %s clocked in at %s (entry %s)", user_id, now, entry_id)
        return entry_id

    def clock_out(self, user_id: int, *, now: Optional[datetime] = None, overtime_note: Optional[str] = None) -> bool:
        """Close today's open entry; returns whether overtime was requested automatically."""
        now = (now or now_local()).replace(microsecond=0)

        entry = self._entries.get_active_for_user_and_date(int(user_id), now.date())
        if not entry:
            raise ValidationError("No active clock in found")

        overtime_threshold = at_time_of_day(entry.clock_in, self._rules.shift_end) + self._rules.overtime_grace
        overtime_requested = now > overtime_threshold
        note = (overtime_note or "").strip() or None

        ok = self._entries.update_clock_out(
            entry_id=entry.entry_id,
            clock_out=now,
            overtime_requested=overtime_requested,
            overtime_note=note,
        )
        if not ok:
            raise ValidationError("Clock out failed")

        logger.info("User %s clocked out at %s (overtime requested: %s)", user_id, now, overtime_requested)
        return overtime_requested

    def today_entry(self, user_id: int, *, now: Optional[datetime] = None) -> Optional[TimeEntry]:
        """The user's latest entry clocked in today, or None before the first clock-in."""
        today = (now or now_local()).date()
        return self._entries.get_latest_for_user_and_date(int(user_id), today)

    def clocked_in_now(self, *, now: Optional[datetime] = None) -> Sequence[ClockedInRow]:
        return self._entries.list_clocked_in((now or now_local()).date())

    def pending_overtime(self) -> Sequence[OvertimeRequestRow]:
        return self._entries.list_pending_overtime()

    def decide_overtime(self, *, entry_id: int, approved: bool, admin_user_id: int) -> None:
        ok = self._entries.decide_overtime(entry_id=int(entry_id), approved=bool(approved), decided_by=int(admin_user_id))
        if not ok:
            raise NotFoundError(f"No overtime request for entry {entry_id}")
        logger.info("Overtime for entry %s %s by %s", entry_id, "approved" if approved else "rejected", admin_user_id)

    def adjust_time(
        self,
        *,
        user_id: int,
        work_date: date,
        clock_in: time,
        clock_out: Optional[time] = None,
    ) -> int:
        """Replace the user's entry for ``work_date`` with the given times."""
        self._require_user(user_id)

        new_in = datetime.combine(work_date, clock_in)
        new_out = datetime.combine(work_date, clock_out) if clock_out else None
        if new_out and new_out < new_in:
            raise ValidationError("Clock out cannot be earlier than clock in")

        entry_id = self._entries.replace_day_entry(
            user_id=int(user_id),
            work_date=work_date,
            week_start=week_start_for(work_date),
            clock_in=new_in,
            clock_out=new_out,
        )
        logger.info("Time for user %s on %s adjusted (entry %s)", user_id, work_date, entry_id)
        return entry_id
