"""Application use cases built on the core ports."""

from yieldind.core.use_cases.position_analytics import (
    AprSnapshot,
    DailyAvgSnapshot,
    PnLSnapshot,
    PositionAnalyticsService,
    ServiceStats,
)

__all__ = [
    "AprSnapshot",
    "DailyAvgSnapshot",
    "PnLSnapshot",
    "PositionAnalyticsService",
    "ServiceStats",
]
