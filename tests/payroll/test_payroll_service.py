from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from timekeeper.core.exceptions import DuplicatePayslipError, StorageError, UserNotFoundError
from timekeeper.payroll.calculator.standard_calculator import StandardPayrollCalculator
from timekeeper.payroll.period import SelectedDatesPeriod, WeekPeriod
from timekeeper.payroll.service import PayrollService

WEEK = WeekPeriod(date(2026, 2, 1))


@pytest.fixture
def service(users_repo, entries_repo, payslips_repo):
    return PayrollService(users_repo, entries_repo, payslips_repo)


def test_generate_creates_one_pending_payslip_per_eligible_user(service, entries_repo, payslips_repo):
    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    entries_repo.add(2, datetime(2026, 2, 3, 7, 30), datetime(2026, 2, 3, 15, 30))
    # inactive user and an entry outside the week
    entries_repo.add(3, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    entries_repo.add(1, datetime(2026, 2, 9, 7, 0), datetime(2026, 2, 9, 15, 0))

    created = service.generate(WEEK)

    assert sorted(p.user_id for p in created) == [1, 2]
    alice = payslips_repo.find(1, date(2026, 2, 1), date(2026, 2, 7))
    assert alice.result.total_hours == Decimal("8.00")
    assert alice.status.value == "pending"

    bob = payslips_repo.find(2, date(2026, 2, 1), date(2026, 2, 7))
    assert bob.result.undertime_deduction == Decimal("12.50")
    assert bob.result.staff_house_deduction == Decimal("250.00")
    assert bob.result.total_salary == Decimal("-62.50")


def test_generate_twice_creates_nothing_new(service, entries_repo, payslips_repo):
    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))

    first = service.generate(WEEK)
    entries_repo.add(1, datetime(2026, 2, 3, 7, 0), datetime(2026, 2, 3, 15, 0))
    second = service.generate(WEEK)

    assert len(first) == 1
    assert second == []
    assert payslips_repo.inserts == 1
    # already generated payslips are not recomputed
    assert payslips_repo.find(1, WEEK.start, WEEK.end).result.total_hours == Decimal("8.00")


def test_generate_skips_users_with_only_open_entries(service, entries_repo):
    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), None)

    assert service.generate(WEEK) == []


def test_generate_skips_zero_hours(service, entries_repo):
    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 7, 0))

    assert service.generate(WEEK) == []


def test_generate_respects_user_subset(service, entries_repo):
    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    entries_repo.add(2, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))

    created = service.generate(WEEK, user_ids=[2])

    assert [p.user_id for p in created] == [2]


def test_selected_dates_only_count_selected_days(service, entries_repo, payslips_repo):
    entries_repo.add(2, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    entries_repo.add(2, datetime(2026, 2, 3, 7, 0), datetime(2026, 2, 3, 15, 0))
    entries_repo.add(2, datetime(2026, 2, 5, 7, 0), datetime(2026, 2, 5, 15, 0))
    period = SelectedDatesPeriod((date(2026, 2, 2), date(2026, 2, 4), date(2026, 2, 5)))

    created = service.generate(period)

    assert len(created) == 1
    payslip = created[0]
    assert (payslip.period_start, payslip.period_end) == (date(2026, 2, 2), date(2026, 2, 5))
    assert payslip.result.total_hours == Decimal("16.00")
    assert payslip.result.staff_house_deduction == Decimal("150.00")


def test_duplicate_on_insert_counts_as_already_generated(users_repo, entries_repo, payslips_repo):
    class RacingPayslips(type(payslips_repo)):
        def find(self, user_id, period_start, period_end):
            return None

        def insert(self, **kwargs):
            raise DuplicatePayslipError("taken by a concurrent run")

    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    service = PayrollService(users_repo, entries_repo, RacingPayslips(users_repo))

    assert service.generate(WEEK) == []


def test_one_user_failing_does_not_abort_the_batch(users_repo, entries_repo, payslips_repo):
    class FlakyPayslips(type(payslips_repo)):
        def insert(self, *, user_id, **kwargs):
            if user_id == 2:
                raise StorageError("disk full")
            return super().insert(user_id=user_id, **kwargs)

    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    entries_repo.add(2, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    service = PayrollService(users_repo, entries_repo, FlakyPayslips(users_repo))

    created = service.generate(WEEK)

    assert [p.user_id for p in created] == [1]


def test_calculate_for_user_distinguishes_missing_user_from_empty_period(service, entries_repo):
    with pytest.raises(UserNotFoundError):
        service.calculate_for_user(99, WEEK)

    assert service.calculate_for_user(1, WEEK) is None

    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 18, 0), overtime_requested=True, overtime_approved=True)
    result = service.calculate_for_user(1, WEEK)
    assert result.total_salary == Decimal("345")


def test_unexpected_error_for_one_user_does_not_abort_the_batch(users_repo, entries_repo, payslips_repo):
    class BrokenForBob(StandardPayrollCalculator):
        def calculate(self, entries, *, staff_house, period):
            if any(e.user_id == 2 for e in entries):
                raise ArithmeticError("bad data for one user")
            return super().calculate(entries, staff_house=staff_house, period=period)

    entries_repo.add(1, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    entries_repo.add(2, datetime(2026, 2, 2, 7, 0), datetime(2026, 2, 2, 15, 0))
    service = PayrollService(users_repo, entries_repo, payslips_repo, calculator=BrokenForBob())

    created = service.generate(WEEK)

    assert [p.user_id for p in created] == [1]
    assert payslips_repo.find(2, WEEK.start, WEEK.end) is None
