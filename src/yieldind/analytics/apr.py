"""Time-weighted APR over a trailing window.

Each collect event is attributed to the gap since the previous collect. When
that gap straddles the window start, only the in-window fraction of the
collected amount counts ("slice attribution"). Slice yields, weighted by their
duration, are averaged over the elapsed period and annualized.

Eviction keeps one observation at or before the window start as an anchor so
the first in-window slice can still be interpolated.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from yieldind.analytics.decimals import decimal_context
from yieldind.core.constants import YEAR, ZERO
from yieldind.core.errors import ConfigurationError, OrderingError
from yieldind.core.models import AprState, YieldObservation

logger = logging.getLogger(__name__)


class WindowedYieldEstimator:
    """APR calculator for a fixed look-back `window_length` (seconds).

    The window is not persisted with the state: the same `AprState` can be
    evaluated by estimators of several windows. Eviction builds a new state
    and never mutates the one it was given.
    """

    def __init__(self, window_length: int, state: AprState | None = None) -> None:
        if window_length <= 0:
            logger.error("AprCalc: window length cannot be negative or zero, got %s", window_length)
            raise ConfigurationError(f"window length cannot be negative or zero, got {window_length}")
        self.window_length = window_length
        self.state = state if state is not None else AprState()

    @classmethod
    def from_serialized(cls, window_length: int, data: Sequence[Decimal]) -> WindowedYieldEstimator:
        return cls(window_length, AprState.deserialize(data))

    def serialize(self) -> list[Decimal]:
        return self.state.serialize()

    def add_transaction(self, collected_amount: Decimal, timestamp: int, total_value_locked: Decimal) -> None:
        if collected_amount == ZERO:
            return

        observations = self.state.observations
        if observations and timestamp <= observations[-1].timestamp:
            last = observations[-1].timestamp
            logger.error("AprCalc: timestamp is not in order, trying to insert %s when last is %s", timestamp, last)
            raise OrderingError(f"collect timestamp {timestamp} is not after last timestamp {last}")

        observations.append(
            YieldObservation(
                collected_amount=collected_amount,
                timestamp=timestamp,
                total_value_locked=total_value_locked,
            )
        )

    def evict_old_entries(self, now: int) -> AprState:
        """Drop observations that no longer touch the window ending at `now`."""
        observations = self.state.observations
        if len(observations) < 2:
            return self.state

        period_start = now - self.window_length
        first_in_window = next(
            (idx for idx, obs in enumerate(observations) if obs.timestamp > period_start),
            len(observations),
        )
        anchor = max(first_in_window - 1, 0)
        self.state = AprState(observations=observations[anchor:])
        return self.state

    def calculate_last_apr(self, now: int) -> Decimal:
        observations = self.evict_old_entries(now).observations

        if not observations:
            return ZERO

        with decimal_context():
            if len(observations) == 1:
                # a lone observation has no gap to spread over: raw ratio, not annualized
                only = observations[0]
                if only.total_value_locked == ZERO:
                    return ZERO
                return only.collected_amount / only.total_value_locked

            period_start = now - self.window_length
            weighted_yield_rate = ZERO
            for prev, curr in zip(observations, observations[1:]):
                slice_start = max(period_start, prev.timestamp)
                span_fraction = Decimal(curr.timestamp - slice_start) / Decimal(curr.timestamp - prev.timestamp)
                slice_collected = curr.collected_amount * span_fraction
                slice_duration = curr.timestamp - slice_start

                # no TVL, no yield rate for this slice
                if curr.total_value_locked == ZERO:
                    continue
                weighted_yield_rate += slice_collected / curr.total_value_locked * slice_duration

            elapsed_period = min(now - observations[0].timestamp, self.window_length)
            if elapsed_period <= 0:
                logger.error("AprCalc: evaluated at %s, before first observation %s", now, observations[0].timestamp)
                raise OrderingError(f"cannot evaluate APR at {now}, before first observation")

            yield_rate = weighted_yield_rate / elapsed_period
            periods_per_year = Decimal(YEAR) / elapsed_period
            return yield_rate * periods_per_year
