"""Error taxonomy for the analytics engine.

All errors derive from `AnalyticsError`, which is a `ValueError` so callers
that already guard on invalid input keep working.

- `ConfigurationError`: a calculator or config built with impossible parameters.
- `OrderingError`: observations delivered out of order (replay, reorg, bug).
- `OversellError`: strict PnL tracking asked to sell more than it holds.
- `StateDecodeError`: a persisted state vector does not fit its layout.
"""

from __future__ import annotations


class AnalyticsError(ValueError):
    """Base class for every error raised by yieldind."""


class ConfigurationError(AnalyticsError):
    pass


class OrderingError(AnalyticsError):
    pass


class OversellError(AnalyticsError):
    pass


class StateDecodeError(AnalyticsError):
    pass
