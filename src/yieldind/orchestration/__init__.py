"""Loading and replaying observation files."""

from yieldind.orchestration.queries import get_connection, load_observations
from yieldind.orchestration.replay import (
    HARVEST_COLUMNS,
    TRADE_COLUMNS,
    VALUE_COLUMNS,
    HarvestRow,
    TradeRow,
    ValueRow,
    replay_harvests,
    replay_trades,
    replay_values,
)

__all__ = [
    "get_connection",
    "load_observations",
    "HARVEST_COLUMNS",
    "TRADE_COLUMNS",
    "VALUE_COLUMNS",
    "HarvestRow",
    "TradeRow",
    "ValueRow",
    "replay_harvests",
    "replay_trades",
    "replay_values",
]
