"""Core data models, configuration, errors and constants.

This package provides:
- State models (Lot, PnLState, YieldObservation, AprState, DailyAvgState)
- Configuration (AnalyticsConfig)
- The IStateRepository port
- Error taxonomy (AnalyticsError and subclasses)
"""

from yieldind.core.config import AnalyticsConfig
from yieldind.core.errors import (
    AnalyticsError,
    ConfigurationError,
    OrderingError,
    OversellError,
    StateDecodeError,
)
from yieldind.core.interfaces import IStateRepository
from yieldind.core.models import AprState, DailyAvgState, Lot, PnLState, YieldObservation

__all__ = [
    "AnalyticsConfig",
    "AnalyticsError",
    "ConfigurationError",
    "OrderingError",
    "OversellError",
    "StateDecodeError",
    "IStateRepository",
    "AprState",
    "DailyAvgState",
    "Lot",
    "PnLState",
    "YieldObservation",
]
