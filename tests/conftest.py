from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from timekeeper.common.datetime_utils import week_start_for
from timekeeper.core.enums import PayslipStatus
from timekeeper.core.exceptions import DuplicatePayslipError
from timekeeper.payroll.model import Payslip, PayslipReportRow
from timekeeper.timeentries.model import ClockedInRow, OvertimeRequestRow, TimeEntry
from timekeeper.users.model import UserProfile


class InMemoryUsers:
    def __init__(self, users=()):
        self.users: dict[int, UserProfile] = {u.user_id: u for u in users}
        self.entries: Optional["InMemoryEntries"] = None

    def get_by_id(self, user_id: int) -> Optional[UserProfile]:
        return self.users.get(user_id)

    def active_users_with_entries_in_period(self, period, *, user_ids=None):
        out = []
        for u in self.users.values():
            if not u.active or (user_ids and u.user_id not in user_ids):
                continue
            if any(e.user_id == u.user_id and period.contains(e.clock_in.date()) for e in self.entries.all()):
                out.append(u)
        return sorted(out, key=lambda u: ((u.department or ""), u.username))


class InMemoryEntries:
    def __init__(self):
        self._by_id: dict[int, TimeEntry] = {}
        self._id = 0
        self.users: Optional[InMemoryUsers] = None

    def all(self):
        return list(self._by_id.values())

    def get(self, entry_id: int) -> TimeEntry:
        return self._by_id[entry_id]

    def add(self, user_id: int, clock_in: datetime, clock_out: Optional[datetime] = None, **kwargs) -> TimeEntry:
        self._id += 1
        entry = TimeEntry(
            entry_id=self._id,
            user_id=user_id,
            clock_in=clock_in,
            clock_out=clock_out,
            work_date=clock_in.date(),
            week_start=week_start_for(clock_in.date()),
            **kwargs,
        )
        self._by_id[self._id] = entry
        return entry

    def entries_for_user_in_period(self, user_id, period):
        items = [e for e in self._by_id.values() if e.user_id == user_id and period.contains(e.clock_in.date())]
        return sorted(items, key=lambda e: e.clock_in)

    def get_active_for_user_and_date(self, user_id, work_date):
        for e in self._by_id.values():
            if e.user_id == user_id and e.clock_in.date() == work_date and e.clock_out is None:
                return e
        return None

    def get_latest_for_user_and_date(self, user_id, work_date):
        day = [e for e in self._by_id.values() if e.user_id == user_id and e.clock_in.date() == work_date]
        return max(day, key=lambda e: e.clock_in, default=None)

    def list_clocked_in(self, work_date):
        rows = []
        for e in self._by_id.values():
            user = self.users.get_by_id(e.user_id)
            if e.clock_out is None and e.clock_in.date() == work_date and user.active:
                rows.append(
                    ClockedInRow(user_id=user.user_id, username=user.username, department=user.department, clock_in=e.clock_in)
                )
        return sorted(rows, key=lambda r: ((r.department or ""), r.clock_in))

    def create_clock_in(self, *, user_id, clock_in, work_date, week_start):
        return self.add(user_id, clock_in).entry_id

    def update_clock_out(self, *, entry_id, clock_out, overtime_requested, overtime_note=None):
        e = self._by_id.get(entry_id)
        if not e or e.clock_out is not None:
            return False
        self._by_id[entry_id] = replace(
            e, clock_out=clock_out, overtime_requested=overtime_requested, overtime_note=overtime_note
        )
        return True

    def list_pending_overtime(self):
        return [
            OvertimeRequestRow(
                entry_id=e.entry_id,
                user_id=e.user_id,
                username=f"user{e.user_id}",
                department=None,
                clock_in=e.clock_in,
                clock_out=e.clock_out,
                overtime_note=e.overtime_note,
            )
            for e in self._by_id.values()
            if e.overtime_requested and e.overtime_approved is None
        ]

    def decide_overtime(self, *, entry_id, approved, decided_by):
        e = self._by_id.get(entry_id)
        if not e or not e.overtime_requested:
            return False
        self._by_id[entry_id] = replace(e, overtime_approved=approved, overtime_approved_by=decided_by)
        return True

    def replace_day_entry(self, *, user_id, work_date, week_start, clock_in, clock_out):
        for k, e in list(self._by_id.items()):
            if e.user_id == user_id and e.clock_in.date() == work_date:
                del self._by_id[k]
        return self.add(user_id, clock_in, clock_out).entry_id


class InMemoryPayslips:
    """Enforces the (user_id, period_start, period_end) uniqueness like the real table."""

    def __init__(self, users: Optional[InMemoryUsers] = None):
        self._by_id: dict[int, Payslip] = {}
        self._id = 0
        self._users = users
        self.inserts = 0

    def find(self, user_id, period_start, period_end):
        for p in self._by_id.values():
            if (p.user_id, p.period_start, p.period_end) == (user_id, period_start, period_end):
                return p
        return None

    def get_by_id(self, payslip_id):
        return self._by_id.get(payslip_id)

    def insert(self, *, user_id, period_start, period_end, result):
        if self.find(user_id, period_start, period_end):
            raise DuplicatePayslipError("duplicate")
        self.inserts += 1
        self._id += 1
        p = Payslip(
            payslip_id=self._id,
            user_id=user_id,
            period_start=period_start,
            period_end=period_end,
            result=result.rounded(),
        )
        self._by_id[self._id] = p
        return p

    def update_fields(self, payslip_id, *, edit, total_salary):
        p = self._by_id.get(payslip_id)
        if not p:
            return False
        result = replace(
            p.result,
            clock_in_time=edit.clock_in_time,
            clock_out_time=edit.clock_out_time,
            total_hours=edit.total_hours,
            overtime_hours=edit.overtime_hours,
            undertime_hours=edit.undertime_hours,
            base_salary=edit.base_salary,
            overtime_pay=edit.overtime_pay,
            undertime_deduction=edit.undertime_deduction,
            staff_house_deduction=edit.staff_house_deduction,
            total_salary=total_salary,
        )
        self._by_id[payslip_id] = replace(p, result=result)
        return True

    def list_for_period(self, period_start, period_end=None):
        rows = []
        for p in self._by_id.values():
            if p.period_start != period_start or (period_end is not None and p.period_end != period_end):
                continue
            user = self._users.get_by_id(p.user_id) if self._users else None
            rows.append(
                PayslipReportRow(
                    payslip=p,
                    username=user.username if user else str(p.user_id),
                    department=user.department if user else None,
                )
            )
        return sorted(rows, key=lambda r: ((r.department or ""), r.username))

    def release(self, period_start, period_end, *, user_ids=None):
        count = 0
        for k, p in list(self._by_id.items()):
            if (p.period_start, p.period_end) != (period_start, period_end) or p.status != PayslipStatus.PENDING:
                continue
            if user_ids and p.user_id not in user_ids:
                continue
            self._by_id[k] = replace(p, status=PayslipStatus.RELEASED)
            count += 1
        return count

    def list_released_for_user(self, user_id, *, year, limit):
        items = [
            p
            for p in self._by_id.values()
            if p.user_id == user_id and p.status == PayslipStatus.RELEASED and p.period_start.year == year
        ]
        items.sort(key=lambda p: p.period_start, reverse=True)
        return items[:limit]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 6, 55, 0)


@pytest.fixture
def monday() -> date:
    # Week of Sunday 2026-02-01 .. Saturday 2026-02-07
    return date(2026, 2, 2)


@pytest.fixture
def entries_repo() -> InMemoryEntries:
    return InMemoryEntries()


@pytest.fixture
def users_repo(entries_repo) -> InMemoryUsers:
    repo = InMemoryUsers(
        [
            UserProfile(user_id=1, username="alice", department="IT", staff_house=False),
            UserProfile(user_id=2, username="bob", department="HR", staff_house=True),
            UserProfile(user_id=3, username="carol", department="IT", staff_house=False, active=False),
        ]
    )
    repo.entries = entries_repo
    entries_repo.users = repo
    return repo


@pytest.fixture
def payslips_repo(users_repo) -> InMemoryPayslips:
    return InMemoryPayslips(users_repo)
