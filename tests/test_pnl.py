"""Unit tests for FIFO lot PnL tracking."""

from decimal import Decimal

import pytest

from yieldind.analytics.pnl import LotPnLTracker
from yieldind.core.errors import OversellError

D = Decimal
PRECISION = D("0.00000001")

# (share_to_underlying_price, underlying_to_usd_price, share_diff) for one investor
REAL_WORLD_TIMELINE = [
    (D("1.0072088101378458"), D("314.89874339460806"), D("20.27876253618866")),
    (D("1.0075970905895832"), D("347.50914177774484"), D("0.6130937649548895")),
    (D("1.0079955733953208"), D("338.9687613836563"), D("0.9812694933012761")),
    (D("1.0091310138565124"), D("357.83013067482005"), D("1.3415799314318817")),
    (D("1.0109650927669185"), D("363.0589258226089"), D("-23.214705725876705")),
    (D("1.0181657075053454"), D("489.8806056476361"), D("29.516921045823203")),
]


def assert_close(actual: Decimal, expected: str) -> None:
    assert abs(actual - D(expected)) < PRECISION, f"{actual} != {expected}"


class TestLotPnLTracker:
    """FIFO matching of sales against open lots."""

    def test_empty_tracker(self):
        pnl = LotPnLTracker()
        assert pnl.get_realized_pnl() == 0
        assert pnl.get_unrealized_pnl(D("25")) == 0
        assert pnl.get_remaining_shares() == 0
        assert pnl.get_remaining_shares_avg_entry_price() == 0

    def test_buys_then_partial_sell(self):
        """Two buys at 10 and 15, sell 3 at 20: 2*(20-10) + 1*(20-15) = 25 realized."""
        pnl = LotPnLTracker()

        pnl.add_transaction(D("2"), D("10"))
        assert pnl.get_realized_pnl() == 0
        assert pnl.get_unrealized_pnl(D("10")) == 0
        assert pnl.get_unrealized_pnl(D("12")) == D("4")

        pnl.add_transaction(D("2"), D("15"))
        assert pnl.get_realized_pnl() == 0
        assert pnl.get_unrealized_pnl(D("15")) == D("10")
        assert pnl.get_unrealized_pnl(D("17")) == D("18")

        pnl.add_transaction(D("-3"), D("20"))
        assert pnl.get_realized_pnl() == D("25")
        assert pnl.get_unrealized_pnl(D("20")) == D("5")
        assert pnl.get_remaining_shares() == D("1")
        assert pnl.get_remaining_shares_avg_entry_price() == D("15")

    def test_exhausted_lots_stay_in_state(self):
        pnl = LotPnLTracker()
        pnl.add_transaction(D("2"), D("10"))
        pnl.add_transaction(D("-2"), D("12"))
        pnl.add_transaction(D("1"), D("11"))

        assert len(pnl.state.lots) == 2
        assert pnl.state.lots[0].exhausted
        assert pnl.state.lots[0].bought_shares == D("2")
        assert pnl.get_remaining_shares_avg_entry_price() == D("11")

    def test_zero_delta_is_noop(self):
        pnl = LotPnLTracker()
        pnl.add_transaction(D("1"), D("10"))
        before = pnl.serialize()

        assert pnl.add_transaction(D("0"), D("99")) == 0
        assert pnl.serialize() == before

    def test_remaining_shares_match_net_position(self):
        pnl = LotPnLTracker()
        deltas = [D("5"), D("-2"), D("3.5"), D("-4"), D("1.25")]
        for i, delta in enumerate(deltas):
            pnl.add_transaction(delta, D(10 + i))
        assert pnl.get_remaining_shares() == sum(deltas)

    def test_from_serialized_resumes(self):
        pnl = LotPnLTracker()
        pnl.add_transaction(D("2"), D("10"))
        pnl.add_transaction(D("2"), D("15"))

        resumed = LotPnLTracker.from_serialized(pnl.serialize())
        resumed.add_transaction(D("-3"), D("20"))
        assert resumed.get_realized_pnl() == D("25")


class TestUnderSell:
    """Sales larger than the shares held."""

    def test_default_fills_what_is_held(self, caplog):
        pnl = LotPnLTracker()
        pnl.add_transaction(D("2"), D("10"))

        with caplog.at_level("WARNING"):
            shortfall = pnl.add_transaction(D("-5"), D("12"))

        assert shortfall == D("3"), "unmatched part should be returned"
        assert pnl.get_realized_pnl() == D("4")
        assert pnl.get_remaining_shares() == 0
        assert "unmatched" in caplog.text

    def test_strict_raises_without_mutating(self):
        pnl = LotPnLTracker(strict=True)
        pnl.add_transaction(D("2"), D("10"))
        before = pnl.serialize()

        with pytest.raises(OversellError):
            pnl.add_transaction(D("-5"), D("12"))
        assert pnl.serialize() == before

    def test_strict_allows_full_exit(self):
        pnl = LotPnLTracker(strict=True)
        pnl.add_transaction(D("2"), D("10"))
        assert pnl.add_transaction(D("-2"), D("11")) == 0
        assert pnl.get_realized_pnl() == D("2")


def test_real_world_yield_pnl():
    pnl = LotPnLTracker()
    for share_price, _, diff in REAL_WORLD_TIMELINE:
        pnl.add_transaction(diff, share_price)

    assert_close(pnl.get_remaining_shares(), "29.516921045823203")
    assert_close(pnl.get_remaining_shares_avg_entry_price(), "1.0181657075053454")
    assert_close(pnl.get_realized_pnl(), "0.08361212681703376")
    assert_close(pnl.get_unrealized_pnl(D("1.021708071749255723")), "0.10455968570304802")


def test_real_world_usd_pnl():
    pnl = LotPnLTracker()
    for share_price, usd_price, diff in REAL_WORLD_TIMELINE:
        pnl.add_transaction(diff, share_price * usd_price)

    current_usd_price = D("1.021708071749255723") * D("477.57009640452765")
    assert_close(pnl.get_remaining_shares(), "29.516921045823203")
    assert_close(pnl.get_remaining_shares_avg_entry_price(), "498.7796334423725")
    assert_close(pnl.get_realized_pnl(), "1054.5381164228797")
    assert_close(pnl.get_unrealized_pnl(current_usd_price), "-320.0345929693857")
