"""Dashboard summary aggregation.

Loads a user's trades and computes stats, equity curve and breakdowns.
Domain logic is pure - database operations go through repo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from kore.aggregation.performance import (
    EquityCurvePoint,
    GroupPerformance,
    build_equity_curve,
    strategy_performance,
    symbol_performance,
)
from kore.aggregation.stats import TradingStats, compute_stats
from kore.core.errors import NotFoundError
from kore.db import repo
from kore.db.repo import DbSession
from kore.models.domain import TradeEntity

logger = logging.getLogger(__name__)


@dataclass
class DashboardSummary:
    """Everything the dashboard renders from the trade history."""

    stats: TradingStats
    equity_curve: list[EquityCurvePoint]
    strategies: list[GroupPerformance]
    symbols: list[GroupPerformance]


def load_trades(
    session: DbSession,
    user_id: str,
    portfolio_id: str | None = None,
) -> list[TradeEntity]:
    """Load the user's trades, optionally for one portfolio.

    Raises:
        NotFoundError: If portfolio_id is given and not the user's.
    """
    if portfolio_id is not None and repo.get_portfolio(session, user_id, portfolio_id) is None:
        raise NotFoundError(f"Portfolio not found: {portfolio_id}")
    return repo.get_trades_for_user(session, user_id, portfolio_id=portfolio_id)


def starting_balance(session: DbSession, user_id: str, portfolio_id: str | None) -> float:
    """Equity curve origin: the portfolio's initial balance, else 0."""
    if portfolio_id is None:
        return 0.0
    portfolio = repo.get_portfolio(session, user_id, portfolio_id)
    return portfolio.initial_balance if portfolio is not None else 0.0


def summarize_dashboard(
    session: DbSession,
    user_id: str,
    portfolio_id: str | None = None,
) -> DashboardSummary:
    """Compute the dashboard summary for a user.

    Args:
        session: Database session.
        user_id: User to summarize.
        portfolio_id: Restrict to one portfolio.

    Returns:
        DashboardSummary with stats, equity curve and breakdowns.
    """
    trades = load_trades(session, user_id, portfolio_id)
    logger.debug(f"Summarizing {len(trades)} trades for user {user_id}")

    strategy_names = {
        s.strategy_id: s.name for s in repo.get_strategies_for_user(session, user_id)
    }

    return _summarize_trades(
        trades,
        strategy_names,
        starting_balance(session, user_id, portfolio_id),
    )


def _summarize_trades(
    trades: list[TradeEntity],
    strategy_names: dict[str, str],
    balance: float,
) -> DashboardSummary:
    """Pure function - no database access."""
    return DashboardSummary(
        stats=compute_stats(trades),
        equity_curve=build_equity_curve(trades, starting_balance=balance),
        strategies=strategy_performance(trades, strategy_names),
        symbols=symbol_performance(trades),
    )
