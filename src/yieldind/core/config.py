from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from yieldind.core.constants import DAY
from yieldind.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsConfig:
    """Configuration for the position analytics service."""

    apr_windows: tuple[int, ...] = (DAY, 7 * DAY, 30 * DAY)
    daily_avg_entries: int = 30  # closed days kept for the moving average
    strict_pnl: bool = False  # raise on under-sells instead of warning
    state_dir: Path | None = None  # None keeps state in memory

    def __post_init__(self) -> None:
        if not self.apr_windows:
            raise ConfigurationError("apr_windows cannot be empty")
        bad = [w for w in self.apr_windows if w <= 0]
        if bad:
            logger.error("AnalyticsConfig: non-positive APR windows %s", bad)
            raise ConfigurationError(f"APR windows must be positive, got {bad}")
        if self.daily_avg_entries <= 0:
            logger.error("AnalyticsConfig: daily_avg_entries must be positive, got %s", self.daily_avg_entries)
            raise ConfigurationError(f"daily_avg_entries must be positive, got {self.daily_avg_entries}")

    @property
    def longest_window(self) -> int:
        return max(self.apr_windows)
