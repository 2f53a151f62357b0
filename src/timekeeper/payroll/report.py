from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Sequence, Union

from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import PayslipStatus
from ..core.exceptions import PayslipNotFoundError
from .model import ZERO, Payslip, PayslipEdit, PayslipReportRow, quantize2
from .period import Period
from .repository import PayslipRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayrollReport:
    rows: list[PayslipReportRow]
    summary: list[dict]


class PayrollReportService:
    def __init__(self, payslips: PayslipRepository):
        self._payslips = payslips

    def report(self, period_start: date, period_end: Optional[date] = None) -> PayrollReport:
        rows = list(self._payslips.list_for_period(period_start, period_end))

        summary_map: dict[str, dict] = {}
        for row in rows:
            dept = row.department or "-"
            s = summary_map.get(dept)
            if not s:
                s = {"department": dept, "payslips": 0, "released": 0, "total_salary": ZERO}
                summary_map[dept] = s
            s["payslips"] += 1
            if row.payslip.status == PayslipStatus.RELEASED:
                s["released"] += 1
            s["total_salary"] += row.payslip.result.total_salary

        summary = []
        for s in summary_map.values():
            summary.append({**s, "total_salary": str(quantize2(s["total_salary"]))})

        return PayrollReport(rows=rows, summary=summary)

    def report_for_period(self, period: Period) -> PayrollReport:
        return self.report(period.start, period.end)

    def edit_payslip(self, payslip_id: int, fields: Union[PayslipEdit, Mapping]) -> Decimal:
        """Overwrite a payslip's stored fields and return the recomputed total.

        The total is always derived from the submitted components; time entries
        are not consulted, so an edited payslip may diverge from them.
        """
        edit = fields if isinstance(fields, PayslipEdit) else PayslipEdit.from_mapping(fields)

        if not self._payslips.get_by_id(int(payslip_id)):
            raise PayslipNotFoundError(f"Payslip {payslip_id} does not exist")

        total_salary = quantize2(edit.total_salary)
        self._payslips.update_fields(int(payslip_id), edit=edit, total_salary=total_salary)
        logger.info("Payslip %s edited (total salary %s)", payslip_id, total_salary)
        return total_salary

    def release(self, period: Period, *, user_ids: Optional[Sequence[int]] = None) -> int:
        """Release the period's pending payslips. Already released ones are left as is."""
        count = self._payslips.release(period.start, period.end, user_ids=user_ids)
        logger.info("Released %d payslip(s) for %s..%s", count, period.start, period.end)
        return count

    def history_for_user(self, user_id: int, *, year: int, limit: int = DEFAULT_HISTORY_LIMIT) -> list[Payslip]:
        return list(self._payslips.list_released_for_user(int(user_id), year=int(year), limit=int(limit)))
