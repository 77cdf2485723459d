"""Tests for headline trading statistics."""

import math
import random
from datetime import datetime, timedelta

from kore.aggregation.stats import (
    TradingStats,
    compute_profit_factor,
    compute_stats,
    compute_streaks,
)
from kore.models.domain import TradeEntity

BASE_DATE = datetime(2024, 3, 1, 9, 30)


def closed_trade(pnl, day, trade_id=None, r_multiple=None, fees=0.0):
    """Closed trade with net P&L pnl exiting `day` days after BASE_DATE."""
    return TradeEntity(
        trade_id=trade_id or f"t{day:03d}",
        user_id="user-1",
        portfolio_id="p-1",
        symbol="AAPL",
        direction="LONG",
        status="CLOSED",
        entry_price=100.0,
        quantity=1.0,
        entry_date=BASE_DATE + timedelta(days=day),
        exit_date=BASE_DATE + timedelta(days=day, hours=2),
        exit_price=100.0 + pnl,
        gross_pnl=pnl + fees,
        fees=fees,
        net_pnl=pnl,
        r_multiple=r_multiple,
    )


def open_trade(trade_id="open-1", status="OPEN"):
    return TradeEntity(
        trade_id=trade_id,
        user_id="user-1",
        portfolio_id="p-1",
        symbol="AAPL",
        direction="LONG",
        status=status,
        entry_price=100.0,
        quantity=1.0,
        entry_date=BASE_DATE,
    )


def series(*pnls):
    return [closed_trade(pnl, day) for day, pnl in enumerate(pnls)]


class TestEmptyInput:
    """No trades yields the zero value."""

    def test_empty_list_is_all_zero(self):
        """All counts and ratios are zero, streak type none."""
        stats = compute_stats([])
        assert stats == TradingStats()
        assert stats.profit_factor == 0
        assert stats.streak_type == "none"

    def test_only_open_trades_counts_totals(self):
        """Open trades count toward totals but not P&L."""
        stats = compute_stats([open_trade("a"), open_trade("b", status="PENDING")])
        assert stats.total_trades == 2
        assert stats.open_trades == 1
        assert stats.closed_trades == 0
        assert stats.net_pnl == 0.0
        assert stats.win_rate == 0.0


class TestCounts:
    """Classification of closed trades."""

    def test_reference_sequence(self):
        """[+100, +50, -30, +20, +20] ordered by exit date."""
        stats = compute_stats(series(100, 50, -30, 20, 20))
        assert stats.closed_trades == 5
        assert stats.winning_trades == 4
        assert stats.losing_trades == 1
        assert stats.win_rate == 80
        assert stats.best_streak == 2
        assert stats.worst_streak == 1
        assert stats.current_streak == 2
        assert stats.streak_type == "winning"
        assert stats.net_pnl == 160
        assert stats.profit_factor == 190 / 30
        assert stats.avg_win == 47.5
        assert stats.avg_loss == -30
        assert stats.largest_win == 100
        assert stats.largest_loss == -30
        assert stats.expectancy == 32

    def test_classification_partitions_closed_trades(self):
        """Wins + losses + breakevens = closed trades."""
        rng = random.Random(7)
        pnls = [rng.choice([-50.0, -1.0, 0.0, 0.0, 2.5, 80.0]) for _ in range(40)]
        stats = compute_stats(series(*pnls) + [open_trade()])
        assert (
            stats.winning_trades + stats.losing_trades + stats.breakeven_trades
            == stats.closed_trades
        )
        assert stats.total_trades == 41

    def test_net_pnl_is_sum_of_closed(self):
        """net_pnl sums the closed trades only."""
        pnls = [12.5, -3.25, 0.0, 7.75]
        stats = compute_stats(series(*pnls) + [open_trade()])
        assert math.isclose(stats.net_pnl, sum(pnls))

    def test_cancelled_trades_ignored(self):
        """Cancelled trades count in total only."""
        stats = compute_stats(series(10) + [open_trade("c", status="CANCELLED")])
        assert stats.total_trades == 2
        assert stats.open_trades == 0
        assert stats.closed_trades == 1

    def test_fees_and_gross_totals(self):
        """total_pnl sums gross, total_fees sums fees."""
        trades = [closed_trade(10, 0, fees=1.0), closed_trade(-5, 1, fees=2.0)]
        stats = compute_stats(trades)
        assert stats.total_pnl == 8.0
        assert stats.total_fees == 3.0
        assert stats.net_pnl == 5.0

    def test_missing_numbers_count_as_zero(self):
        """A closed trade without P&L is a breakeven."""
        trade = open_trade(status="CLOSED")
        stats = compute_stats([trade])
        assert stats.closed_trades == 1
        assert stats.breakeven_trades == 1
        assert stats.net_pnl == 0.0
        assert stats.total_fees == 0.0


class TestProfitFactor:
    """Profit factor edge cases."""

    def test_unbounded_when_no_losses(self):
        """Wins without losses is +inf."""
        assert compute_stats(series(10, 20)).profit_factor == math.inf

    def test_zero_when_no_wins(self):
        assert compute_profit_factor(0.0, -30.0) == 0.0
        assert compute_profit_factor(0.0, 0.0) == 0.0

    def test_all_losing(self):
        """[-10, -20, -30] has no wins at all."""
        stats = compute_stats(series(-10, -20, -30))
        assert stats.profit_factor == 0
        assert stats.avg_win == 0
        assert stats.largest_win == 0
        assert stats.worst_streak == 3
        assert stats.streak_type == "losing"
        assert stats.current_streak == 3

    def test_ratio(self):
        assert compute_profit_factor(90.0, -30.0) == 3.0


class TestStreaks:
    """Running and longest streaks."""

    def test_breakeven_resets_streak(self):
        """A zero result ends the current run."""
        state = compute_streaks([10, 10, 0, 10])
        assert state.best_streak == 2
        assert state.current_streak == 1
        assert state.streak_type == "winning"

    def test_trailing_breakeven_is_none(self):
        state = compute_streaks([-5, -5, 0])
        assert state.current_streak == 0
        assert state.streak_type == "none"
        assert state.worst_streak == 2

    def test_alternating(self):
        state = compute_streaks([1, -1, 1, -1])
        assert state.best_streak == 1
        assert state.worst_streak == 1
        assert state.streak_type == "losing"

    def test_streaks_follow_exit_date_not_input_order(self):
        """Input order does not matter; exit date does."""
        trades = series(100, 50, -30, 20, 20)
        stats = compute_stats(list(reversed(trades)))
        assert stats.current_streak == 2
        assert stats.streak_type == "winning"


class TestDeterminism:
    """Same input, same output."""

    def test_idempotent(self):
        trades = series(3.3, -1.1, 0.0, 7.7, -2.2) + [open_trade()]
        assert compute_stats(trades) == compute_stats(trades)

    def test_permutation_invariant(self):
        """Shuffling the input gives an identical result."""
        trades = series(0.1, 0.2, -0.3, 1e6, -1e-6, 0.7, 0.0)
        expected = compute_stats(trades)
        rng = random.Random(42)
        for _ in range(10):
            shuffled = list(trades)
            rng.shuffle(shuffled)
            assert compute_stats(shuffled) == expected

    def test_same_exit_time_breaks_tie_by_id(self):
        """Trades exiting together are ordered by entry date then id."""
        a = closed_trade(-5, 0, trade_id="a")
        b = closed_trade(5, 0, trade_id="b")
        assert compute_stats([b, a]).streak_type == "winning"
        assert compute_stats([a, b]).streak_type == "winning"


class TestRMultiple:
    """avg_r_multiple averages only trades that have one."""

    def test_average_ignores_missing(self):
        trades = [
            closed_trade(10, 0, r_multiple=2.0),
            closed_trade(-5, 1, r_multiple=-1.0),
            closed_trade(3, 2),
        ]
        assert compute_stats(trades).avg_r_multiple == 0.5

    def test_no_r_multiples(self):
        assert compute_stats(series(1, 2)).avg_r_multiple == 0.0
