"""FIFO lot accounting: realized and unrealized PnL for one position.

Buys open lots; sells consume the oldest open lots first and realize
`consumed * (sell_price - entry_price)` per lot. Exhausted lots stay in the
state (inert) so the lot list only ever grows.

See https://money.stackexchange.com/a/144091 for the method.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from yieldind.analytics.decimals import decimal_context
from yieldind.core.constants import ZERO
from yieldind.core.errors import OversellError
from yieldind.core.models import Lot, PnLState

logger = logging.getLogger(__name__)


class LotPnLTracker:
    """FIFO PnL calculator over a `PnLState`.

    Parameters
    ----------
    state : PnLState | None
        State to resume from; a fresh one is created when omitted.
    strict : bool
        Raise `OversellError` when a sale exceeds the shares held instead of
        logging a warning and realizing only the held part.
    """

    def __init__(self, state: PnLState | None = None, *, strict: bool = False) -> None:
        self.state = state if state is not None else PnLState()
        self.strict = strict

    @classmethod
    def from_serialized(cls, data: Sequence[Decimal], *, strict: bool = False) -> LotPnLTracker:
        return cls(PnLState.deserialize(data), strict=strict)

    def serialize(self) -> list[Decimal]:
        return self.state.serialize()

    def add_transaction(self, share_delta: Decimal, price: Decimal) -> Decimal:
        """Record a buy (positive delta) or a sell (negative delta).

        Returns the part of a sale that could not be matched against open
        lots; always zero for buys and fully covered sales.
        """
        if share_delta == ZERO:
            return ZERO

        if share_delta > ZERO:
            self.state.lots.append(Lot(bought_shares=share_delta, remaining_shares=share_delta, entry_price=price))
            return ZERO

        to_sell = -share_delta
        if self.strict:
            held = self.get_remaining_shares()
            if to_sell > held:
                logger.error("PnL: cannot sell %s shares, only %s held", to_sell, held)
                raise OversellError(f"cannot sell {to_sell} shares, only {held} held")

        trx_pnl = ZERO
        with decimal_context():
            for lot in self.state.lots:
                if lot.exhausted:
                    continue
                consumed = min(to_sell, lot.remaining_shares)
                trx_pnl += consumed * (price - lot.entry_price)
                lot.remaining_shares -= consumed
                to_sell -= consumed
                if to_sell == ZERO:
                    break
            self.state.realized_pnl += trx_pnl

        if to_sell > ZERO:
            logger.warning("PnL: sale of %s shares left %s unmatched against open lots", -share_delta, to_sell)
        return to_sell

    def get_realized_pnl(self) -> Decimal:
        return self.state.realized_pnl

    def get_unrealized_pnl(self, current_price: Decimal) -> Decimal:
        """Paper PnL of the open lots marked at `current_price`."""
        unrealized = ZERO
        with decimal_context():
            for lot in self.state.lots:
                if lot.exhausted:
                    continue
                unrealized += lot.remaining_shares * (current_price - lot.entry_price)
        return unrealized

    def get_remaining_shares(self) -> Decimal:
        with decimal_context():
            return sum((lot.remaining_shares for lot in self.state.lots), ZERO)

    def get_remaining_shares_avg_entry_price(self) -> Decimal:
        total_shares = ZERO
        total_cost = ZERO
        with decimal_context():
            for lot in self.state.lots:
                total_shares += lot.remaining_shares
                total_cost += lot.remaining_shares * lot.entry_price
            if total_shares == ZERO:
                return ZERO
            return total_cost / total_shares
