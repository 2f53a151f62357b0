"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Payroll defaults are only the fallback values of ``PayrollRules``.
"""

from datetime import time

DEFAULT_HOURLY_RATE = "25"
DEFAULT_OVERTIME_RATE = "35"
DEFAULT_STAFF_HOUSE_WEEKLY = "250"
DEFAULT_WORKWEEK_DAYS = 5

DEFAULT_SHIFT_START = time(7, 0)
DEFAULT_SHIFT_END = time(15, 30)
DEFAULT_OVERTIME_GRACE_MINUTES = 30

WEEK_LENGTH_DAYS = 7
DB_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_HISTORY_LIMIT = 200
