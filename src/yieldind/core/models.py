"""State models for the analytics calculators (flat-vector layout).

This module defines:
- `Lot` / `PnLState`: FIFO cost-basis lots and realized PnL.
- `YieldObservation` / `AprState`: collect events used for windowed APR.
- `DailyAvgState`: closed daily samples plus the pending (open) day.

Design notes
------------
- Every state serializes to a flat `list[Decimal]`; the owning entity stores
  that vector as-is and never interprets it.
- Timestamps are stored as decimals and truncated back to `int` on load.
- Deserialization never mutates its input and rejects vectors whose length
  does not fit the layout.
- An empty vector always loads as an empty/zeroed state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from yieldind.core.constants import ZERO
from yieldind.core.errors import StateDecodeError

logger = logging.getLogger(__name__)

_LOT_WIDTH = 3
_OBSERVATION_WIDTH = 3


def _check_width(kind: str, payload_len: int, width: int) -> None:
    if payload_len % width != 0:
        logger.error("%s state has %d trailing values, expected groups of %d", kind, payload_len % width, width)
        raise StateDecodeError(f"{kind} state length does not fit groups of {width}")


# === PnL ===


@dataclass(slots=True)
class Lot:
    """One purchase; `remaining_shares` shrinks as later sales consume it."""

    bought_shares: Decimal
    remaining_shares: Decimal
    entry_price: Decimal

    @property
    def exhausted(self) -> bool:
        return self.remaining_shares == ZERO


@dataclass(slots=True)
class PnLState:
    realized_pnl: Decimal = ZERO
    lots: list[Lot] = field(default_factory=list)  # oldest first

    def serialize(self) -> list[Decimal]:
        """[realized_pnl, bought₁, remaining₁, entry₁, bought₂, ...]"""
        out = [self.realized_pnl]
        for lot in self.lots:
            out.extend((lot.bought_shares, lot.remaining_shares, lot.entry_price))
        return out

    @staticmethod
    def deserialize(data: Sequence[Decimal]) -> PnLState:
        if len(data) == 0:
            return PnLState()
        _check_width("pnl", len(data) - 1, _LOT_WIDTH)
        lots = [
            Lot(bought_shares=data[i], remaining_shares=data[i + 1], entry_price=data[i + 2])
            for i in range(1, len(data), _LOT_WIDTH)
        ]
        return PnLState(realized_pnl=data[0], lots=lots)


# === APR ===


@dataclass(slots=True, frozen=True)
class YieldObservation:
    """Amount collected at `timestamp` while `total_value_locked` was at work."""

    collected_amount: Decimal
    timestamp: int
    total_value_locked: Decimal


@dataclass(slots=True)
class AprState:
    observations: list[YieldObservation] = field(default_factory=list)  # ascending timestamps

    def serialize(self) -> list[Decimal]:
        """[collected₁, timestamp₁, tvl₁, collected₂, ...]"""
        out: list[Decimal] = []
        for obs in self.observations:
            out.extend((obs.collected_amount, Decimal(obs.timestamp), obs.total_value_locked))
        return out

    @staticmethod
    def deserialize(data: Sequence[Decimal]) -> AprState:
        _check_width("apr", len(data), _OBSERVATION_WIDTH)
        observations = [
            YieldObservation(
                collected_amount=data[i],
                timestamp=int(data[i + 1]),
                total_value_locked=data[i + 2],
            )
            for i in range(0, len(data), _OBSERVATION_WIDTH)
        ]
        return AprState(observations=observations)


# === Daily average ===


@dataclass(slots=True)
class DailyAvgState:
    pending_value: Decimal = ZERO
    pending_value_timestamp: int = 0
    # one sample per fully elapsed day, oldest first
    closed_values: list[Decimal] = field(default_factory=list)

    def serialize(self) -> list[Decimal]:
        """[pending_value, pending_value_timestamp, closed₁, closed₂, ...]"""
        return [self.pending_value, Decimal(self.pending_value_timestamp), *self.closed_values]

    @staticmethod
    def deserialize(data: Sequence[Decimal]) -> DailyAvgState:
        if len(data) == 0:
            return DailyAvgState()
        if len(data) < 2:
            logger.error("daily_avg state has %d values, expected at least 2", len(data))
            raise StateDecodeError("daily_avg state is missing its pending timestamp")
        return DailyAvgState(
            pending_value=data[0],
            pending_value_timestamp=int(data[1]),
            closed_values=list(data[2:]),
        )
