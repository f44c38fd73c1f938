"""Moving average of a value sampled once per day.

Closed days weigh one full day each; the pending (still open) day weighs
only the seconds elapsed since UTC midnight of its latest sample.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from yieldind.analytics.decimals import decimal_context
from yieldind.core.constants import DAY, ZERO
from yieldind.core.errors import ConfigurationError
from yieldind.core.models import DailyAvgState

logger = logging.getLogger(__name__)


class DayWeightedAverager:
    def __init__(self, state: DailyAvgState | None = None) -> None:
        self.state = state if state is not None else DailyAvgState()

    @classmethod
    def from_serialized(cls, data: Sequence[Decimal]) -> DayWeightedAverager:
        return cls(DailyAvgState.deserialize(data))

    def serialize(self) -> list[Decimal]:
        return self.state.serialize()

    def add_value(self, value: Decimal) -> None:
        """Close one day with `value` as its final reading."""
        self.state.closed_values.append(value)

    def set_pending_value(self, value: Decimal, timestamp: int) -> None:
        self.state.pending_value = value
        self.state.pending_value_timestamp = timestamp

    def evict_old_entries(self, entries_to_use: int) -> DailyAvgState:
        """Keep only the last `entries_to_use` closed days."""
        if entries_to_use <= 0:
            logger.error("DailyAvgCalc: entries_to_use cannot be negative or zero, got %s", entries_to_use)
            raise ConfigurationError(f"entries_to_use cannot be negative or zero, got {entries_to_use}")

        self.state = DailyAvgState(
            pending_value=self.state.pending_value,
            pending_value_timestamp=self.state.pending_value_timestamp,
            closed_values=self.state.closed_values[-entries_to_use:],
        )
        return self.state

    def avg(self, entries_to_use: int) -> Decimal:
        state = self.evict_old_entries(entries_to_use)

        if not state.closed_values:
            return state.pending_value

        closed_seconds = DAY * len(state.closed_values)
        pending_seconds = state.pending_value_timestamp % DAY
        with decimal_context():
            weighted = sum((value * DAY for value in state.closed_values), ZERO)
            weighted += state.pending_value * pending_seconds
            return weighted / (closed_seconds + pending_seconds)
