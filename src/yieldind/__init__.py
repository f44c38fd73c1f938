from __future__ import annotations

from .analytics import DayWeightedAverager, LotPnLTracker, WindowedYieldEstimator
from .core.config import AnalyticsConfig
from .core.errors import AnalyticsError
from .core.use_cases.position_analytics import PositionAnalyticsService
from .storage.state_store import InMemoryStateStore, JsonlStateStore

__version__ = "0.1.0"

__all__ = [
    "LotPnLTracker",
    "WindowedYieldEstimator",
    "DayWeightedAverager",
    "AnalyticsConfig",
    "AnalyticsError",
    "PositionAnalyticsService",
    "InMemoryStateStore",
    "JsonlStateStore",
]
