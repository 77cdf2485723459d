"""Trading statistics aggregation.

Computes the dashboard KPIs (win rate, profit factor, expectancy,
streaks) from a user's trades. Pure functions - no database access.

Ordering: closed trades are processed by (exit_date, entry_date,
trade_id) ascending. Sums and streaks both follow this order, so the
result does not depend on the order of the input sequence.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Sequence

from kore.models.domain import TradeEntity

StreakType = Literal["winning", "losing", "none"]


@dataclass(frozen=True)
class TradingStats:
    """Aggregate performance of a set of trades.

    profit_factor is math.inf when there are wins and no losses.
    """

    total_trades: int = 0
    open_trades: int = 0
    closed_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    net_pnl: float = 0.0
    total_pnl: float = 0.0
    total_fees: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    expectancy: float = 0.0
    avg_r_multiple: float = 0.0
    current_streak: int = 0
    streak_type: StreakType = "none"
    best_streak: int = 0
    worst_streak: int = 0


@dataclass(frozen=True)
class StreakState:
    """Result of a streak scan."""

    current_streak: int
    streak_type: StreakType
    best_streak: int
    worst_streak: int


def _or_zero(value: float | None) -> float:
    return value if value is not None else 0.0


def closed_trade_order(trade: TradeEntity) -> tuple[datetime, datetime, str]:
    """Sort key for closed trades: exit date, then entry date, then id.

    A closed trade missing its exit date sorts at its entry date.
    """
    exit_date = trade.exit_date if trade.exit_date is not None else trade.entry_date
    return (exit_date, trade.entry_date, trade.trade_id)


def sorted_closed_trades(trades: Sequence[TradeEntity]) -> list[TradeEntity]:
    """Return the CLOSED trades in processing order."""
    closed = [t for t in trades if t.status == "CLOSED"]
    return sorted(closed, key=closed_trade_order)


def compute_profit_factor(sum_wins: float, sum_losses: float) -> float:
    """Gross wins over absolute gross losses.

    Args:
        sum_wins: Sum of positive net P&L.
        sum_losses: Sum of negative net P&L (<= 0).

    Returns:
        math.inf when there are wins but no losses, 0.0 when there
        are no wins, otherwise the ratio.
    """
    if sum_losses == 0:
        return math.inf if sum_wins > 0 else 0.0
    return sum_wins / abs(sum_losses)


def compute_streaks(pnls: Sequence[float]) -> StreakState:
    """Scan ordered net P&L values for win/loss runs.

    A breakeven result (0) resets the running streak to zero with
    type "none"; it never counts toward a winning or losing run.

    Args:
        pnls: Net P&L values, oldest first.

    Returns:
        StreakState with trailing run and longest runs.
    """
    run = 0
    run_type: StreakType = "none"
    best = 0
    worst = 0

    for pnl in pnls:
        if pnl > 0:
            run = run + 1 if run_type == "winning" else 1
            run_type = "winning"
            best = max(best, run)
        elif pnl < 0:
            run = run + 1 if run_type == "losing" else 1
            run_type = "losing"
            worst = max(worst, run)
        else:
            run = 0
            run_type = "none"

    return StreakState(
        current_streak=run,
        streak_type=run_type,
        best_streak=best,
        worst_streak=worst,
    )


def compute_stats(trades: Sequence[TradeEntity]) -> TradingStats:
    """Compute TradingStats for a user's trades.

    Only CLOSED trades contribute to P&L metrics; total_trades and
    open_trades are counted over the whole input. Missing numeric
    fields count as zero.

    Args:
        trades: Trades of one user, in any order. May be empty.

    Returns:
        TradingStats. All zeros (streak type "none") for no trades.
    """
    total_trades = len(trades)
    open_trades = sum(1 for t in trades if t.status == "OPEN")
    closed = sorted_closed_trades(trades)

    if not closed:
        return TradingStats(total_trades=total_trades, open_trades=open_trades)

    wins = 0
    losses = 0
    breakeven = 0
    sum_wins = 0.0
    sum_losses = 0.0
    net_pnl = 0.0
    total_pnl = 0.0
    total_fees = 0.0
    sum_r = 0.0
    r_count = 0
    largest_win = 0.0
    largest_loss = 0.0
    pnls: list[float] = []

    for trade in closed:
        pnl = _or_zero(trade.net_pnl)
        pnls.append(pnl)
        net_pnl += pnl
        total_pnl += _or_zero(trade.gross_pnl)
        total_fees += _or_zero(trade.fees)

        if pnl > 0:
            wins += 1
            sum_wins += pnl
            largest_win = max(largest_win, pnl)
        elif pnl < 0:
            losses += 1
            sum_losses += pnl
            largest_loss = min(largest_loss, pnl)
        else:
            breakeven += 1

        if trade.r_multiple is not None:
            sum_r += trade.r_multiple
            r_count += 1

    closed_count = len(closed)
    streaks = compute_streaks(pnls)

    return TradingStats(
        total_trades=total_trades,
        open_trades=open_trades,
        closed_trades=closed_count,
        winning_trades=wins,
        losing_trades=losses,
        breakeven_trades=breakeven,
        win_rate=wins / closed_count * 100,
        profit_factor=compute_profit_factor(sum_wins, sum_losses),
        net_pnl=net_pnl,
        total_pnl=total_pnl,
        total_fees=total_fees,
        avg_win=sum_wins / wins if wins else 0.0,
        avg_loss=sum_losses / losses if losses else 0.0,
        largest_win=largest_win,
        largest_loss=largest_loss,
        expectancy=net_pnl / closed_count,
        avg_r_multiple=sum_r / r_count if r_count else 0.0,
        current_streak=streaks.current_streak,
        streak_type=streaks.streak_type,
        best_streak=streaks.best_streak,
        worst_streak=streaks.worst_streak,
    )
