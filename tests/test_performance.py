"""Tests for equity curve, calendar and group breakdowns."""

import math
from datetime import date, datetime

from kore.aggregation.performance import (
    build_equity_curve,
    daily_pnl,
    emotion_performance,
    monthly_summary,
    strategy_performance,
    symbol_performance,
)
from kore.models.domain import TradeEntity


def make_trade(
    trade_id, pnl, exit_date, symbol="AAPL", strategy_id=None, emotions=(), status="CLOSED"
):
    return TradeEntity(
        trade_id=trade_id,
        user_id="user-1",
        portfolio_id="p-1",
        symbol=symbol,
        direction="LONG",
        status=status,
        entry_price=100.0,
        quantity=1.0,
        entry_date=exit_date.replace(hour=8),
        exit_date=exit_date if status == "CLOSED" else None,
        net_pnl=pnl if status == "CLOSED" else None,
        strategy_id=strategy_id,
        emotion_tags=list(emotions),
    )


JAN_2 = datetime(2024, 1, 2, 15, 0)
JAN_3 = datetime(2024, 1, 3, 15, 0)
FEB_1 = datetime(2024, 2, 1, 15, 0)


class TestEquityCurve:
    """Cumulative P&L per exit day."""

    def test_empty(self):
        assert build_equity_curve([]) == []

    def test_one_point_per_day(self):
        """Trades on the same day collapse into one point."""
        trades = [
            make_trade("a", 10.0, JAN_2),
            make_trade("b", -4.0, JAN_2.replace(hour=16)),
            make_trade("c", 6.0, JAN_3),
        ]
        curve = build_equity_curve(trades)
        assert [p.date for p in curve] == [date(2024, 1, 2), date(2024, 1, 3)]
        assert [p.pnl for p in curve] == [6.0, 6.0]
        assert [p.cumulative_pnl for p in curve] == [6.0, 12.0]
        assert [p.trade_count for p in curve] == [2, 3]

    def test_starting_balance(self):
        curve = build_equity_curve([make_trade("a", 5.0, JAN_2)], starting_balance=1000.0)
        assert curve[0].cumulative_pnl == 1005.0

    def test_open_trades_skipped(self):
        trades = [make_trade("a", 5.0, JAN_2), make_trade("b", 0.0, JAN_3, status="OPEN")]
        assert len(build_equity_curve(trades)) == 1

    def test_input_order_irrelevant(self):
        trades = [make_trade("a", 1.0, JAN_2), make_trade("c", 2.0, JAN_3)]
        assert build_equity_curve(trades) == build_equity_curve(list(reversed(trades)))


class TestCalendar:
    """Daily P&L and monthly header."""

    def test_daily_cells(self):
        trades = [
            make_trade("b", -4.0, JAN_2.replace(hour=16)),
            make_trade("a", 10.0, JAN_2),
            make_trade("c", -6.0, JAN_3),
        ]
        days = daily_pnl(trades)
        assert list(days) == [date(2024, 1, 2), date(2024, 1, 3)]
        assert days[date(2024, 1, 2)].pnl == 6.0
        assert days[date(2024, 1, 2)].trade_ids == ["a", "b"]
        assert days[date(2024, 1, 3)].trades_count == 1

    def test_monthly_summary_filters_month(self):
        trades = [
            make_trade("a", 10.0, JAN_2),
            make_trade("b", -6.0, JAN_3),
            make_trade("c", 50.0, FEB_1),
        ]
        summary = monthly_summary(daily_pnl(trades), 2024, 1)
        assert summary.total_pnl == 4.0
        assert summary.win_days == 1
        assert summary.loss_days == 1
        assert summary.total_trades == 2

    def test_empty_month(self):
        summary = monthly_summary({}, 2024, 5)
        assert (summary.total_pnl, summary.win_days, summary.total_trades) == (0.0, 0, 0)


class TestGroupPerformance:
    """Breakdowns by strategy, symbol and emotion."""

    def test_symbol_groups_sorted_by_pnl(self):
        trades = [
            make_trade("a", 10.0, JAN_2, symbol="AAPL"),
            make_trade("b", 30.0, JAN_2, symbol="SPY"),
            make_trade("c", -5.0, JAN_3, symbol="AAPL"),
        ]
        groups = symbol_performance(trades)
        assert [g.key for g in groups] == ["SPY", "AAPL"]
        aapl = groups[1]
        assert aapl.trades == 2
        assert aapl.total_pnl == 5.0
        assert aapl.win_rate == 50.0
        assert aapl.profit_factor == 2.0
        assert math.isinf(groups[0].profit_factor)

    def test_strategy_labels_and_untagged_skipped(self):
        trades = [
            make_trade("a", 10.0, JAN_2, strategy_id="s1"),
            make_trade("b", 5.0, JAN_2, strategy_id="gone"),
            make_trade("c", 99.0, JAN_3),
        ]
        groups = strategy_performance(trades, {"s1": "Breakout"})
        assert [(g.key, g.label) for g in groups] == [("s1", "Breakout"), ("gone", "gone")]

    def test_emotion_trade_counts_in_each_tag(self):
        trades = [
            make_trade("a", 10.0, JAN_2, emotions=["calm", "confident", "calm"]),
            make_trade("b", -20.0, JAN_3, emotions=["fomo"]),
        ]
        groups = emotion_performance(trades)
        assert [g.key for g in groups] == ["calm", "confident", "fomo"]
        assert groups[0].trades == 1
        assert groups[2].total_pnl == -20.0

    def test_open_trades_not_grouped(self):
        trades = [make_trade("a", 0.0, JAN_2, status="OPEN")]
        assert symbol_performance(trades) == []
