from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from yieldind.analytics.apr import WindowedYieldEstimator
from yieldind.analytics.daily_avg import DayWeightedAverager
from yieldind.analytics.periods import format_duration, interval_from_timestamp
from yieldind.analytics.pnl import LotPnLTracker
from yieldind.core.config import AnalyticsConfig
from yieldind.core.constants import APR_KIND, DAILY_AVG_KIND, DAY, PNL_KIND, ZERO
from yieldind.core.errors import OrderingError
from yieldind.core.interfaces import IStateRepository

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class PnLSnapshot:
    """Position metrics right after one trade."""

    subject: str
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    remaining_shares: Decimal
    avg_entry_price: Decimal
    unmatched_shares: Decimal = ZERO  # part of a sale with no open lot behind it

    def as_row(self) -> dict[str, object]:
        return {
            "subject": self.subject,
            "realized_pnl": self.realized_pnl,
            "unrealized_pnl": self.unrealized_pnl,
            "remaining_shares": self.remaining_shares,
            "avg_entry_price": self.avg_entry_price,
            "unmatched_shares": self.unmatched_shares,
        }


@dataclass(kw_only=True)
class AprSnapshot:
    """APR for each configured window, evaluated at `now`."""

    subject: str
    now: int
    aprs: dict[int, Decimal]

    def as_row(self) -> dict[str, object]:
        row: dict[str, object] = {"subject": self.subject, "now": self.now}
        for window, apr in self.aprs.items():
            row[f"apr_{format_duration(window)}"] = apr
        return row


@dataclass(kw_only=True)
class DailyAvgSnapshot:
    subject: str
    timestamp: int
    average: Decimal
    closed_days: int

    def as_row(self) -> dict[str, object]:
        return {
            "subject": self.subject,
            "timestamp": self.timestamp,
            "average": self.average,
            "closed_days": self.closed_days,
        }


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class ServiceStats:
    """Counters mutated by every observation the service processes."""

    trades: int = 0
    harvests: int = 0  # recorded collects only
    skipped_zero_harvests: int = 0
    values: int = 0
    closed_days: int = 0
    subjects: set[str] = field(default_factory=set)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class PositionAnalyticsService:
    """
    Load → observe → save for one subject at a time.

    The service only depends on `IStateRepository`: whether states live in
    memory, in a JSONL journal or in the indexing host's entity store is an
    infrastructure concern. Calls for one subject must be serialized by the
    caller; different subjects are independent.
    """

    def __init__(self, repository: IStateRepository, config: AnalyticsConfig | None = None) -> None:
        self.repository = repository
        self.config = config if config is not None else AnalyticsConfig()
        self.stats = ServiceStats()

    def record_trade(
        self,
        subject: str,
        share_delta: Decimal,
        price: Decimal,
        current_price: Decimal | None = None,
    ) -> PnLSnapshot:
        """Apply a share balance change at `price`; unrealized PnL is marked at
        `current_price` (the trade price when omitted)."""
        tracker = LotPnLTracker.from_serialized(
            self.repository.load(PNL_KIND, subject),
            strict=self.config.strict_pnl,
        )
        unmatched = tracker.add_transaction(share_delta, price)
        self.repository.save(PNL_KIND, subject, tracker.serialize())

        self.stats.trades += 1
        self.stats.subjects.add(subject)
        logger.debug("trade %s: delta=%s price=%s", subject, share_delta, price)

        mark = price if current_price is None else current_price
        return PnLSnapshot(
            subject=subject,
            realized_pnl=tracker.get_realized_pnl(),
            unrealized_pnl=tracker.get_unrealized_pnl(mark),
            remaining_shares=tracker.get_remaining_shares(),
            avg_entry_price=tracker.get_remaining_shares_avg_entry_price(),
            unmatched_shares=unmatched,
        )

    def record_harvest(
        self,
        subject: str,
        collected_amount: Decimal,
        timestamp: int,
        total_value_locked: Decimal,
        now: int | None = None,
    ) -> AprSnapshot:
        """Record a collect event and evaluate every configured APR window.

        All windows read the same state; the persisted state is evicted to
        the longest window so shorter ones always find their anchor.
        """
        now = timestamp if now is None else now
        keeper = WindowedYieldEstimator.from_serialized(
            self.config.longest_window,
            self.repository.load(APR_KIND, subject),
        )
        observations = keeper.state.observations
        if observations and timestamp < observations[-1].timestamp:
            last = observations[-1].timestamp
            logger.error("harvest %s at %s precedes last collect at %s", subject, timestamp, last)
            raise OrderingError(f"collect timestamp {timestamp} precedes last timestamp {last}")

        if collected_amount == ZERO:
            self.stats.skipped_zero_harvests += 1
        else:
            self.stats.harvests += 1
        keeper.add_transaction(collected_amount, timestamp, total_value_locked)

        aprs = {
            window: WindowedYieldEstimator(window, keeper.state).calculate_last_apr(now)
            for window in self.config.apr_windows
        }
        keeper.evict_old_entries(now)
        self.repository.save(APR_KIND, subject, keeper.serialize())

        self.stats.subjects.add(subject)
        logger.debug("harvest %s: collected=%s tvl=%s at %s", subject, collected_amount, total_value_locked, timestamp)
        return AprSnapshot(subject=subject, now=now, aprs=aprs)

    def aprs_at(self, subject: str, now: int) -> AprSnapshot:
        """Evaluate the stored APR state at `now` without recording anything."""
        data = self.repository.load(APR_KIND, subject)
        state = WindowedYieldEstimator.from_serialized(self.config.longest_window, data).state
        aprs = {
            window: WindowedYieldEstimator(window, state).calculate_last_apr(now)
            for window in self.config.apr_windows
        }
        return AprSnapshot(subject=subject, now=now, aprs=aprs)

    def record_value(self, subject: str, value: Decimal, timestamp: int) -> DailyAvgSnapshot:
        """Sample a value (e.g. position value in USD) for the daily average.

        A sample on a later UTC day closes the pending day(s) with the last
        pending value, carried forward across days without samples.
        """
        entries = self.config.daily_avg_entries
        averager = DayWeightedAverager.from_serialized(self.repository.load(DAILY_AVG_KIND, subject))
        state = averager.state

        # a zero timestamp means no sample is pending, so there is no day to close
        if state.pending_value_timestamp != 0:
            if timestamp < state.pending_value_timestamp:
                logger.error(
                    "DailyAvg: value for %s at %s precedes pending sample at %s",
                    subject, timestamp, state.pending_value_timestamp,
                )
                raise OrderingError(f"value timestamp {timestamp} precedes pending sample")
            elapsed_days = (
                interval_from_timestamp(timestamp, DAY) - interval_from_timestamp(state.pending_value_timestamp, DAY)
            ) // DAY
            to_close = min(elapsed_days, entries)
            for _ in range(to_close):
                averager.add_value(state.pending_value)
            self.stats.closed_days += to_close

        averager.set_pending_value(value, timestamp)
        average = averager.avg(entries)
        self.repository.save(DAILY_AVG_KIND, subject, averager.serialize())

        self.stats.values += 1
        self.stats.subjects.add(subject)
        return DailyAvgSnapshot(
            subject=subject,
            timestamp=timestamp,
            average=average,
            closed_days=len(averager.state.closed_values),
        )
