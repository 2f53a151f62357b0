from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ...timeentries.model import TimeEntry
from ..model import PayrollResult
from ..period import Period


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(
        self,
        entries: Iterable[TimeEntry],
        *,
        staff_house: bool,
        period: Period,
    ) -> Optional[PayrollResult]:
        """Return totals for one user's entries in ``period``, or None when no entry is closed."""

        raise NotImplementedError
