"""Performance breakdowns for dashboard charts.

Equity curve, P&L calendar and per-group (strategy, symbol, emotion)
performance. Pure functions - no database access. Group metrics reuse
compute_stats so every breakdown agrees with the headline stats.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Sequence

from kore.aggregation.stats import (
    TradingStats,
    closed_trade_order,
    compute_stats,
    sorted_closed_trades,
)
from kore.models.domain import TradeEntity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquityCurvePoint:
    """Cumulative P&L after one trading day."""

    date: date
    pnl: float
    cumulative_pnl: float
    trade_count: int


@dataclass
class DayPnL:
    """Calendar cell: P&L of trades exited on one day."""

    date: date
    pnl: float = 0.0
    trades_count: int = 0
    trade_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MonthlySummary:
    """Calendar header totals for one month."""

    year: int
    month: int
    total_pnl: float
    win_days: int
    loss_days: int
    total_trades: int


@dataclass(frozen=True)
class GroupPerformance:
    """Performance of one group of closed trades."""

    key: str
    label: str
    total_pnl: float
    win_rate: float
    trades: int
    profit_factor: float
    avg_r_multiple: float


def build_equity_curve(
    trades: Sequence[TradeEntity],
    starting_balance: float = 0.0,
) -> list[EquityCurvePoint]:
    """Build the equity curve from closed trades.

    One point per exit day, in chronological order.

    Args:
        trades: Trades of one user (any status, any order).
        starting_balance: Value the curve starts from.

    Returns:
        List of EquityCurvePoint, empty when nothing is closed.
    """
    points: list[EquityCurvePoint] = []
    cumulative = starting_balance
    trade_count = 0
    day_pnl = 0.0
    current_day: date | None = None

    for trade in sorted_closed_trades(trades):
        day = closed_trade_order(trade)[0].date()
        if current_day is not None and day != current_day:
            points.append(EquityCurvePoint(current_day, day_pnl, cumulative, trade_count))
            day_pnl = 0.0
        current_day = day
        pnl = trade.net_pnl if trade.net_pnl is not None else 0.0
        day_pnl += pnl
        cumulative += pnl
        trade_count += 1

    if current_day is not None:
        points.append(EquityCurvePoint(current_day, day_pnl, cumulative, trade_count))

    return points


def daily_pnl(trades: Iterable[TradeEntity]) -> dict[date, DayPnL]:
    """Group trades with an exit date by exit day.

    Args:
        trades: Trades of one user.

    Returns:
        Mapping of day to DayPnL, ordered by day.
    """
    days: dict[date, DayPnL] = {}
    for trade in sorted(
        (t for t in trades if t.exit_date is not None),
        key=lambda t: (t.exit_date, t.trade_id),
    ):
        day = trade.exit_date.date()
        cell = days.get(day)
        if cell is None:
            cell = days[day] = DayPnL(date=day)
        cell.pnl += trade.net_pnl if trade.net_pnl is not None else 0.0
        cell.trades_count += 1
        cell.trade_ids.append(trade.trade_id)
    return days


def monthly_summary(days: dict[date, DayPnL], year: int, month: int) -> MonthlySummary:
    """Summarize the calendar cells falling in one month."""
    total_pnl = 0.0
    win_days = 0
    loss_days = 0
    total_trades = 0

    for day, cell in days.items():
        if day.year != year or day.month != month:
            continue
        total_pnl += cell.pnl
        total_trades += cell.trades_count
        if cell.pnl > 0:
            win_days += 1
        elif cell.pnl < 0:
            loss_days += 1

    return MonthlySummary(
        year=year,
        month=month,
        total_pnl=total_pnl,
        win_days=win_days,
        loss_days=loss_days,
        total_trades=total_trades,
    )


def _group_performance(
    trades: Sequence[TradeEntity],
    keys_for: Callable[[TradeEntity], Iterable[str]],
    label_for: Callable[[str], str] = lambda key: key,
) -> list[GroupPerformance]:
    """Run compute_stats over each group of closed trades.

    A trade may belong to several groups (e.g. emotion tags).
    Sorted by total P&L descending, then key.
    """
    groups: dict[str, list[TradeEntity]] = defaultdict(list)
    for trade in trades:
        if trade.status != "CLOSED":
            continue
        for key in keys_for(trade):
            groups[key].append(trade)

    logger.debug(f"Computing performance for {len(groups)} groups")

    results = []
    for key, group in groups.items():
        stats: TradingStats = compute_stats(group)
        results.append(
            GroupPerformance(
                key=key,
                label=label_for(key),
                total_pnl=stats.net_pnl,
                win_rate=stats.win_rate,
                trades=stats.closed_trades,
                profit_factor=stats.profit_factor,
                avg_r_multiple=stats.avg_r_multiple,
            )
        )

    results.sort(key=lambda g: (-g.total_pnl, g.key))
    return results


def strategy_performance(
    trades: Sequence[TradeEntity],
    strategy_names: dict[str, str],
) -> list[GroupPerformance]:
    """Performance per strategy. Trades without a strategy are skipped.

    Args:
        trades: Trades of one user.
        strategy_names: strategy_id -> display name.
    """
    return _group_performance(
        trades,
        lambda t: [t.strategy_id] if t.strategy_id is not None else [],
        lambda key: strategy_names.get(key, key),
    )


def symbol_performance(trades: Sequence[TradeEntity]) -> list[GroupPerformance]:
    """Performance per traded symbol."""
    return _group_performance(trades, lambda t: [t.symbol])


def emotion_performance(trades: Sequence[TradeEntity]) -> list[GroupPerformance]:
    """Performance per emotion tag recorded on the trade."""
    return _group_performance(trades, lambda t: sorted(set(t.emotion_tags)))
