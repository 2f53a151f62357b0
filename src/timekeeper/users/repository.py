from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..payroll.period import Period
from .model import UserProfile


class UserRepository(Protocol):
    """Repository interface for user profiles.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[UserProfile]:
        raise NotImplementedError

    def active_users_with_entries_in_period(
        self,
        period: Period,
        *,
        user_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[UserProfile]:
        """Active users with at least one entry whose clock-in date is inside ``period``."""

        raise NotImplementedError
