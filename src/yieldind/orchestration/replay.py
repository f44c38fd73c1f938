"""Replay observation frames through PositionAnalyticsService.

Each row is validated into a pydantic model before it reaches the service,
so a malformed amount fails with the row's content instead of deep inside
the calculators.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from decimal import Decimal
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict

from yieldind.core.use_cases.position_analytics import (
    AprSnapshot,
    DailyAvgSnapshot,
    PnLSnapshot,
    PositionAnalyticsService,
)

logger = logging.getLogger(__name__)

TRADE_COLUMNS = ("subject", "timestamp", "share_delta", "price")
HARVEST_COLUMNS = ("subject", "timestamp", "collected_amount", "total_value_locked")
VALUE_COLUMNS = ("subject", "timestamp", "value")


class TradeRow(BaseModel):
    """A change of share balance for one position."""

    model_config = ConfigDict(frozen=True)

    subject: str
    timestamp: int
    share_delta: Decimal
    price: Decimal
    current_price: Decimal | None = None


class HarvestRow(BaseModel):
    """A collect event with the vault TVL at that time."""

    model_config = ConfigDict(frozen=True)

    subject: str
    timestamp: int
    collected_amount: Decimal
    total_value_locked: Decimal


class ValueRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str
    timestamp: int
    value: Decimal


def _records(frame: pd.DataFrame) -> Iterator[dict[str, Any]]:
    for record in frame.to_dict("records"):
        yield {k: (None if v is None or (isinstance(v, float) and pd.isna(v)) else v) for k, v in record.items()}


def replay_trades(
    frame: pd.DataFrame,
    service: PositionAnalyticsService,
    *,
    current_price: Decimal | None = None,
) -> dict[str, PnLSnapshot]:
    """Feed trades in frame order; returns the last snapshot per subject.

    `current_price` overrides any per-row ``current_price`` column.
    """
    last: dict[str, PnLSnapshot] = {}
    for record in _records(frame):
        row = TradeRow.model_validate(record)
        mark = current_price if current_price is not None else row.current_price
        last[row.subject] = service.record_trade(row.subject, row.share_delta, row.price, mark)
    logger.info("Replayed %d trades for %d subjects", len(frame), len(last))
    return last


def replay_harvests(
    frame: pd.DataFrame,
    service: PositionAnalyticsService,
    *,
    now: int | None = None,
) -> dict[str, AprSnapshot]:
    """Feed harvests in frame order; each is evaluated at its own timestamp.

    Collects of one subject sharing a timestamp (same block) are merged:
    amounts are summed and the last row's TVL is kept. With `now`, the final
    snapshot of every subject is re-evaluated at that instant instead.
    """
    merged: dict[tuple[str, int], HarvestRow] = {}
    for record in _records(frame):
        row = HarvestRow.model_validate(record)
        key = (row.subject, row.timestamp)
        prev = merged.get(key)
        if prev is not None:
            row = row.model_copy(update={"collected_amount": prev.collected_amount + row.collected_amount})
        merged[key] = row

    last: dict[str, AprSnapshot] = {}
    for row in merged.values():
        last[row.subject] = service.record_harvest(
            row.subject, row.collected_amount, row.timestamp, row.total_value_locked
        )
    if now is not None:
        last = {subject: service.aprs_at(subject, now) for subject in last}
    logger.info("Replayed %d harvests for %d subjects", len(frame), len(last))
    return last


def replay_values(frame: pd.DataFrame, service: PositionAnalyticsService) -> dict[str, DailyAvgSnapshot]:
    last: dict[str, DailyAvgSnapshot] = {}
    for record in _records(frame):
        row = ValueRow.model_validate(record)
        last[row.subject] = service.record_value(row.subject, row.value, row.timestamp)
    logger.info("Replayed %d values for %d subjects", len(frame), len(last))
    return last
