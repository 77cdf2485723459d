"""Portfolios and strategies.

A user's first portfolio becomes the default. Balances are derived from
closed trades, never stored.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from kore.aggregation.stats import compute_stats
from kore.core.errors import NotFoundError
from kore.db import repo
from kore.db.repo import DbSession
from kore.models.domain import PortfolioEntity, PortfolioType, StrategyEntity

logger = logging.getLogger(__name__)


@dataclass
class PortfolioBalance:
    """Portfolio with its derived balance."""

    portfolio: PortfolioEntity
    net_pnl: float
    balance: float


def create_portfolio(
    session: DbSession,
    user_id: str,
    name: str,
    portfolio_type: PortfolioType = "PERSONAL",
    initial_balance: float = 0.0,
    currency: str = "USD",
) -> PortfolioEntity:
    """Create a portfolio. The user's first one is marked default."""
    is_first = repo.count_portfolios_for_user(session, user_id) == 0
    portfolio = PortfolioEntity(
        portfolio_id=str(uuid.uuid4()),
        user_id=user_id,
        name=name.strip(),
        portfolio_type=portfolio_type,
        initial_balance=initial_balance,
        currency=currency.upper(),
        is_default=is_first,
    )
    repo.create_portfolio(session, portfolio)
    repo.commit(session)
    logger.info(f"Created portfolio {portfolio.portfolio_id} for user {user_id}")
    return portfolio


def list_portfolios(session: DbSession, user_id: str) -> list[PortfolioBalance]:
    """List the user's portfolios with balance = initial + closed net P&L."""
    result = []
    for portfolio in repo.get_portfolios_for_user(session, user_id):
        trades = repo.get_trades_for_user(
            session, user_id, portfolio_id=portfolio.portfolio_id, status="CLOSED"
        )
        net_pnl = compute_stats(trades).net_pnl
        result.append(
            PortfolioBalance(
                portfolio=portfolio,
                net_pnl=net_pnl,
                balance=portfolio.initial_balance + net_pnl,
            )
        )
    return result


def delete_portfolio(session: DbSession, user_id: str, portfolio_id: str) -> None:
    """Delete a portfolio together with its trades.

    Deleting the default portfolio makes the oldest remaining one the
    default.

    Raises:
        NotFoundError: If the user has no such portfolio.
    """
    portfolio = repo.get_portfolio(session, user_id, portfolio_id)
    if portfolio is None or not repo.delete_portfolio(session, user_id, portfolio_id):
        raise NotFoundError(f"Portfolio not found: {portfolio_id}")

    if portfolio.is_default:
        promoted = repo.promote_oldest_portfolio(session, user_id)
        if promoted is not None:
            logger.info(f"Promoted portfolio {promoted.portfolio_id} to default")

    repo.commit(session)
    logger.info(f"Deleted portfolio {portfolio_id}")


def create_strategy(
    session: DbSession, user_id: str, name: str, description: str | None = None
) -> StrategyEntity:
    """Add a strategy to the user's playbook."""
    strategy = StrategyEntity(
        strategy_id=str(uuid.uuid4()),
        user_id=user_id,
        name=name.strip(),
        description=description,
    )
    repo.create_strategy(session, strategy)
    repo.commit(session)
    logger.info(f"Created strategy {strategy.strategy_id} for user {user_id}")
    return strategy


def list_strategies(session: DbSession, user_id: str) -> list[StrategyEntity]:
    return repo.get_strategies_for_user(session, user_id)


def delete_strategy(session: DbSession, user_id: str, strategy_id: str) -> None:
    """Delete a strategy; its trades keep existing untagged.

    Raises:
        NotFoundError: If the user has no such strategy.
    """
    if not repo.delete_strategy(session, user_id, strategy_id):
        raise NotFoundError(f"Strategy not found: {strategy_id}")
    repo.commit(session)
    logger.info(f"Deleted strategy {strategy_id}")
