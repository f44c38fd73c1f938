"""Position analytics calculators.

This package provides:
- LotPnLTracker: FIFO realized / unrealized PnL
- WindowedYieldEstimator: time-weighted APR over a trailing window
- DayWeightedAverager: daily moving average with a pending day
- Decimal precision and period helpers shared by the calculators
"""

from yieldind.analytics.apr import WindowedYieldEstimator
from yieldind.analytics.daily_avg import DayWeightedAverager
from yieldind.analytics.decimals import decimal_context
from yieldind.analytics.periods import format_duration, interval_from_timestamp, parse_duration
from yieldind.analytics.pnl import LotPnLTracker

__all__ = [
    "LotPnLTracker",
    "WindowedYieldEstimator",
    "DayWeightedAverager",
    "decimal_context",
    "format_duration",
    "interval_from_timestamp",
    "parse_duration",
]
