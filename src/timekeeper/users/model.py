from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserProfile:
    """Domain entity: the payroll-relevant part of a user record.

    Note: Plain data object (no DB access code). Owned by user management;
    payroll only reads it.
    """

    user_id: int
    username: str
    department: Optional[str] = None
    staff_house: bool = False
    active: bool = True
