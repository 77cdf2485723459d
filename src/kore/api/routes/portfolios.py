"""Portfolios and strategies API endpoint.

GET /api/portfolios - List portfolios with derived balances
POST /api/portfolios - Create a portfolio
DELETE /api/portfolios/{portfolio_id} - Delete a portfolio and its trades
GET /api/strategies - List strategies
POST /api/strategies - Create a strategy
DELETE /api/strategies/{strategy_id} - Delete a strategy
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from kore.api.app import get_current_user_id, get_db_session
from kore.core.errors import NotFoundError
from kore.db.repo import DbSession
from kore.journal import portfolios as journal
from kore.journal.portfolios import PortfolioBalance
from kore.models.domain import StrategyEntity
from kore.models.types import PortfolioCreate, PortfolioDetail, StrategyCreate, StrategyDetail

router = APIRouter()


def _build_portfolio_detail(entry: PortfolioBalance) -> PortfolioDetail:
    portfolio = entry.portfolio
    return PortfolioDetail(
        portfolio_id=portfolio.portfolio_id,
        name=portfolio.name,
        portfolio_type=portfolio.portfolio_type,
        initial_balance=portfolio.initial_balance,
        currency=portfolio.currency,
        is_default=portfolio.is_default,
        net_pnl=entry.net_pnl,
        balance=entry.balance,
    )


def _build_strategy_detail(strategy: StrategyEntity) -> StrategyDetail:
    return StrategyDetail(
        strategy_id=strategy.strategy_id,
        name=strategy.name,
        description=strategy.description,
    )


@router.get("/portfolios", response_model=list[PortfolioDetail])
def list_portfolios(
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[PortfolioDetail]:
    """List the caller's portfolios with balance = initial + closed net P&L."""
    return [_build_portfolio_detail(p) for p in journal.list_portfolios(session, user_id)]


@router.post("/portfolios", response_model=PortfolioDetail, status_code=201)
def create_portfolio(
    payload: PortfolioCreate,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> PortfolioDetail:
    """Create a portfolio. The caller's first portfolio becomes the default."""
    portfolio = journal.create_portfolio(
        session,
        user_id,
        name=payload.name,
        portfolio_type=payload.portfolio_type,
        initial_balance=payload.initial_balance,
        currency=payload.currency,
    )
    return _build_portfolio_detail(
        PortfolioBalance(portfolio=portfolio, net_pnl=0.0, balance=portfolio.initial_balance)
    )


@router.delete("/portfolios/{portfolio_id}", status_code=204)
def delete_portfolio(
    portfolio_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        journal.delete_portfolio(session, user_id, portfolio_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return Response(status_code=204)


@router.get("/strategies", response_model=list[StrategyDetail])
def list_strategies(
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[StrategyDetail]:
    return [_build_strategy_detail(s) for s in journal.list_strategies(session, user_id)]


@router.post("/strategies", response_model=StrategyDetail, status_code=201)
def create_strategy(
    payload: StrategyCreate,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> StrategyDetail:
    strategy = journal.create_strategy(session, user_id, payload.name, payload.description)
    return _build_strategy_detail(strategy)


@router.delete("/strategies/{strategy_id}", status_code=204)
def delete_strategy(
    strategy_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    """Delete a strategy. Its trades are kept without a strategy."""
    try:
        journal.delete_strategy(session, user_id, strategy_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return Response(status_code=204)
