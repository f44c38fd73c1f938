from __future__ import annotations

from decimal import Decimal

# durations, in seconds
HOUR       = 60 * 60
DAY        = 60 * 60 * 24
WEEK       = DAY * 7
YEAR       = DAY * 365

# significant digits for all analytics arithmetic
DECIMAL_PRECISION = 50

ZERO = Decimal(0)

# state kinds used as repository namespaces
PNL_KIND       = "pnl"
APR_KIND       = "apr"
DAILY_AVG_KIND = "daily_avg"
