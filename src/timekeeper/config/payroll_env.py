"""Payroll rule overrides read from ``PAYROLL_*`` environment variables.

Only variables that are set end up in the mapping; ``PayrollRules.from_settings``
falls back to its defaults for the rest.
"""

import os

_ENV_KEYS = {
    "hourly_rate": "PAYROLL_HOURLY_RATE",
    "overtime_rate": "PAYROLL_OVERTIME_RATE",
    "staff_house_weekly": "PAYROLL_STAFF_HOUSE_WEEKLY",
    "workweek_days": "PAYROLL_WORKWEEK_DAYS",
    "shift_start": "PAYROLL_SHIFT_START",
    "shift_end": "PAYROLL_SHIFT_END",
    "overtime_grace_minutes": "PAYROLL_OVERTIME_GRACE_MINUTES",
}


def payroll_from_env() -> dict:
    return {key: os.environ[env] for key, env in _ENV_KEYS.items() if os.getenv(env)}
