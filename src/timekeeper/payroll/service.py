from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.exceptions import DuplicatePayslipError, UserNotFoundError
from ..timeentries.repository import TimeEntryRepository
from ..users.model import UserProfile
from ..users.repository import UserRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import ZERO, PayrollResult, Payslip
from .period import Period
from .repository import PayslipRepository

logger = logging.getLogger(__name__)


class PayrollService:
    """Generates payslips for a period.

    Generation is idempotent per user: an existing payslip for
    (user, period start, period end) is never overwritten or duplicated, so a
    partially failed run can simply be repeated.
    """

    def __init__(
        self,
        users: UserRepository,
        entries: TimeEntryRepository,
        payslips: PayslipRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._users = users
        self._entries = entries
        self._payslips = payslips
        self._calculator = calculator or StandardPayrollCalculator()

    def _calculate(self, user: UserProfile, period: Period) -> Optional[PayrollResult]:
        entries = self._entries.entries_for_user_in_period(user.user_id, period)
        # The store may hand back neighbouring days for sparse periods; keep only selected ones.
        entries = [e for e in entries if period.contains(e.clock_in.date())]
        return self._calculator.calculate(entries, staff_house=user.staff_house, period=period)

    def calculate_for_user(self, user_id: int, period: Period) -> Optional[PayrollResult]:
        """Totals for one user, or None when the user has no closed entry in the period.

        Raises UserNotFoundError when there is no profile for ``user_id``.
        """
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise UserNotFoundError(f"User {user_id} does not exist")
        return self._calculate(user, period)

    def generate(self, period: Period, *, user_ids: Optional[Sequence[int]] = None) -> list[Payslip]:
        """Create missing payslips for every eligible user; returns only the new ones."""
        users = self._users.active_users_with_entries_in_period(period, user_ids=user_ids)
        wanted = {int(i) for i in user_ids} if user_ids else None

        created: list[Payslip] = []
        failed = 0
        for user in users:
            if not user.active or (wanted is not None and user.user_id not in wanted):
                continue
            try:
                payslip = self._generate_for_user(user, period)
            except Exception:
                failed += 1
                logger.exception("Payslip generation failed for user %s (%s..%s)", user.user_id, period.start, period.end)
                continue
            if payslip:
                created.append(payslip)

        logger.info(
            "Generated %d payslip(s) for %s period %s..%s (%d eligible, %d failed)",
            len(created),
            period.kind.value,
            period.start,
            period.end,
            len(users),
            failed,
        )
        return created

    def _generate_for_user(self, user: UserProfile, period: Period) -> Optional[Payslip]:
        result = self._calculate(user, period)
        if result is None or result.total_hours <= ZERO:
            logger.debug("User %s has no payable hours in %s..%s", user.user_id, period.start, period.end)
            return None

        if self._payslips.find(user.user_id, period.start, period.end):
            logger.debug("Payslip already exists for user %s (%s..%s)", user.user_id, period.start, period.end)
            return None

        if result.total_salary < ZERO:
            logger.warning("Negative total salary %s for user %s (%s..%s)", result.total_salary, user.user_id, period.start, period.end)

        try:
            payslip = self._payslips.insert(
                user_id=user.user_id,
                period_start=period.start,
                period_end=period.end,
                result=result,
            )
        except DuplicatePayslipError:
            # A concurrent run inserted it between find() and insert().
            logger.debug("Payslip for user %s was generated concurrently", user.user_id)
            return None

        logger.info("Payslip %s created for user %s (%s..%s)", payslip.payslip_id, user.username, period.start, period.end)
        return payslip
