from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import PayrollResult, Payslip, PayslipEdit, PayslipReportRow


class PayslipRepository(Protocol):
    """Persistence for payslips.

    Storage enforces one payslip per (user_id, period_start, period_end);
    ``insert`` raises ``DuplicatePayslipError`` when the key is taken.
    """

    def find(self, user_id: int, period_start: date, period_end: date) -> Optional[Payslip]:
        raise NotImplementedError

    def get_by_id(self, payslip_id: int) -> Optional[Payslip]:
        raise NotImplementedError

    def insert(self, *, user_id: int, period_start: date, period_end: date, result: PayrollResult) -> Payslip:
        raise NotImplementedError

    def update_fields(self, payslip_id: int, *, edit: PayslipEdit, total_salary: Decimal) -> bool:
        raise NotImplementedError

    def list_for_period(self, period_start: date, period_end: Optional[date] = None) -> Sequence[PayslipReportRow]:
        """Payslips for the period key, ordered by department then username."""

        raise NotImplementedError

    def release(self, period_start: date, period_end: date, *, user_ids: Optional[Sequence[int]] = None) -> int:
        """Flip pending payslips of the period to released; returns how many changed."""

        raise NotImplementedError

    def list_released_for_user(self, user_id: int, *, year: int, limit: int) -> Sequence[Payslip]:
        raise NotImplementedError
