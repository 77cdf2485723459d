"""Statistics API endpoint.

GET /api/stats - Headline KPIs
GET /api/stats/equity-curve - Cumulative net P&L per exit day
GET /api/stats/calendar - Daily P&L for one month
GET /api/stats/strategies - Performance per strategy
GET /api/stats/symbols - Performance per symbol
GET /api/stats/emotions - Performance per emotion tag
GET /api/dashboard - All of the above in one payload

Every endpoint accepts an optional portfolio_id filter.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query

from kore.aggregation.performance import (
    EquityCurvePoint,
    GroupPerformance,
    build_equity_curve,
    daily_pnl,
    emotion_performance,
    monthly_summary,
    strategy_performance,
    symbol_performance,
)
from kore.aggregation.stats import TradingStats, compute_stats
from kore.aggregation.summary import load_trades, starting_balance, summarize_dashboard
from kore.api.app import get_current_user_id, get_db_session
from kore.core.errors import NotFoundError
from kore.db import repo
from kore.db.repo import DbSession
from kore.models.domain import TradeEntity
from kore.models.types import (
    CalendarDay,
    CalendarMonth,
    DashboardDetail,
    EquityPointDetail,
    GroupPerformanceDetail,
    TradingStatsDetail,
    finite_or_none,
)

router = APIRouter()


def build_stats_detail(stats: TradingStats) -> TradingStatsDetail:
    """Build TradingStatsDetail, mapping an infinite profit factor to null."""
    return TradingStatsDetail(
        total_trades=stats.total_trades,
        open_trades=stats.open_trades,
        closed_trades=stats.closed_trades,
        winning_trades=stats.winning_trades,
        losing_trades=stats.losing_trades,
        breakeven_trades=stats.breakeven_trades,
        win_rate=stats.win_rate,
        profit_factor=finite_or_none(stats.profit_factor),
        profit_factor_unbounded=math.isinf(stats.profit_factor),
        net_pnl=stats.net_pnl,
        total_pnl=stats.total_pnl,
        total_fees=stats.total_fees,
        avg_win=stats.avg_win,
        avg_loss=stats.avg_loss,
        largest_win=stats.largest_win,
        largest_loss=stats.largest_loss,
        expectancy=stats.expectancy,
        avg_r_multiple=stats.avg_r_multiple,
        current_streak=stats.current_streak,
        streak_type=stats.streak_type,
        best_streak=stats.best_streak,
        worst_streak=stats.worst_streak,
    )


def build_equity_points(points: list[EquityCurvePoint]) -> list[EquityPointDetail]:
    return [
        EquityPointDetail(
            date=p.date,
            pnl=p.pnl,
            cumulative_pnl=p.cumulative_pnl,
            trade_count=p.trade_count,
        )
        for p in points
    ]


def build_group_details(groups: list[GroupPerformance]) -> list[GroupPerformanceDetail]:
    return [
        GroupPerformanceDetail(
            key=g.key,
            label=g.label,
            total_pnl=g.total_pnl,
            win_rate=g.win_rate,
            trades=g.trades,
            profit_factor=finite_or_none(g.profit_factor),
            avg_r_multiple=g.avg_r_multiple,
        )
        for g in groups
    ]


def _load(session: DbSession, user_id: str, portfolio_id: str | None) -> list[TradeEntity]:
    """Load trades, translating an unknown portfolio to 404."""
    try:
        return load_trades(session, user_id, portfolio_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/stats", response_model=TradingStatsDetail)
def get_stats(
    portfolio_id: str | None = None,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> TradingStatsDetail:
    """Headline KPIs over the caller's trades."""
    return build_stats_detail(compute_stats(_load(session, user_id, portfolio_id)))


@router.get("/stats/equity-curve", response_model=list[EquityPointDetail])
def get_equity_curve(
    portfolio_id: str | None = None,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[EquityPointDetail]:
    """Equity curve, starting from the portfolio's initial balance if filtered."""
    trades = _load(session, user_id, portfolio_id)
    balance = starting_balance(session, user_id, portfolio_id)
    return build_equity_points(build_equity_curve(trades, starting_balance=balance))


@router.get("/stats/calendar", response_model=CalendarMonth)
def get_calendar(
    year: int | None = Query(default=None, ge=1970, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    portfolio_id: str | None = None,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> CalendarMonth:
    """Daily P&L cells and header totals for one month.

    Year and month default to the current UTC month.
    """
    today = datetime.now(timezone.utc).date()
    year = year if year is not None else today.year
    month = month if month is not None else today.month

    days = daily_pnl(_load(session, user_id, portfolio_id))
    summary = monthly_summary(days, year, month)

    return CalendarMonth(
        year=summary.year,
        month=summary.month,
        total_pnl=summary.total_pnl,
        win_days=summary.win_days,
        loss_days=summary.loss_days,
        total_trades=summary.total_trades,
        days=[
            CalendarDay(
                date=day,
                pnl=cell.pnl,
                trades_count=cell.trades_count,
                trade_ids=cell.trade_ids,
            )
            for day, cell in days.items()
            if day.year == year and day.month == month
        ],
    )


@router.get("/stats/strategies", response_model=list[GroupPerformanceDetail])
def get_strategy_performance(
    portfolio_id: str | None = None,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[GroupPerformanceDetail]:
    trades = _load(session, user_id, portfolio_id)
    names = {s.strategy_id: s.name for s in repo.get_strategies_for_user(session, user_id)}
    return build_group_details(strategy_performance(trades, names))


@router.get("/stats/symbols", response_model=list[GroupPerformanceDetail])
def get_symbol_performance(
    portfolio_id: str | None = None,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[GroupPerformanceDetail]:
    return build_group_details(symbol_performance(_load(session, user_id, portfolio_id)))


@router.get("/stats/emotions", response_model=list[GroupPerformanceDetail])
def get_emotion_performance(
    portfolio_id: str | None = None,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[GroupPerformanceDetail]:
    return build_group_details(emotion_performance(_load(session, user_id, portfolio_id)))


@router.get("/dashboard", response_model=DashboardDetail)
def get_dashboard(
    portfolio_id: str | None = None,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> DashboardDetail:
    """Stats, equity curve and breakdowns in one call.

    Raises:
        HTTPException: 404 if portfolio_id is not the caller's.
    """
    try:
        summary = summarize_dashboard(session, user_id, portfolio_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return DashboardDetail(
        stats=build_stats_detail(summary.stats),
        equity_curve=build_equity_points(summary.equity_curve),
        strategies=build_group_details(summary.strategies),
        symbols=build_group_details(summary.symbols),
    )
