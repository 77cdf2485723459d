"""Pydantic models for the Kore API.

Request models validate journal input; response models mirror the
domain entities and aggregation results.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Direction = Literal["LONG", "SHORT"]
Status = Literal["PENDING", "OPEN", "CLOSED", "CANCELLED"]
Mode = Literal["LIVE", "BACKTEST"]


# ============================================================================
# Trades
# ============================================================================


class TradeCreate(BaseModel):
    """New trade submission."""

    portfolio_id: str = Field(min_length=1)
    strategy_id: str | None = None
    symbol: str = Field(min_length=1, max_length=20)
    direction: Direction
    mode: Mode = "LIVE"
    status: Literal["PENDING", "OPEN"] = "OPEN"
    entry_price: float = Field(gt=0)
    quantity: float = Field(gt=0)
    stop_loss: float | None = Field(default=None, gt=0)
    take_profit: float | None = Field(default=None, gt=0)
    entry_date: dt.datetime
    setup_notes: str | None = Field(default=None, max_length=2000)
    chart_timeframe: str | None = Field(default=None, max_length=10)
    tags: list[str] = Field(default_factory=list)
    tilt_score: int | None = Field(default=None, ge=1, le=10)
    confidence_level: int | None = Field(default=None, ge=1, le=10)
    stress_level: int | None = Field(default=None, ge=1, le=10)
    emotion_tags: list[str] = Field(default_factory=list)
    discipline_rating: bool | None = None

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, value: str) -> str:
        return value.strip().upper()


class TradeUpdate(BaseModel):
    """Partial trade edit. Omitted fields are left unchanged."""

    portfolio_id: str | None = None
    strategy_id: str | None = None
    symbol: str | None = Field(default=None, min_length=1, max_length=20)
    direction: Direction | None = None
    mode: Mode | None = None
    entry_price: float | None = Field(default=None, gt=0)
    quantity: float | None = Field(default=None, gt=0)
    stop_loss: float | None = Field(default=None, gt=0)
    take_profit: float | None = Field(default=None, gt=0)
    entry_date: dt.datetime | None = None
    setup_notes: str | None = Field(default=None, max_length=2000)
    exit_notes: str | None = Field(default=None, max_length=2000)
    lessons_learned: str | None = Field(default=None, max_length=2000)
    chart_timeframe: str | None = Field(default=None, max_length=10)
    tags: list[str] | None = None
    tilt_score: int | None = Field(default=None, ge=1, le=10)
    confidence_level: int | None = Field(default=None, ge=1, le=10)
    stress_level: int | None = Field(default=None, ge=1, le=10)
    emotion_tags: list[str] | None = None
    discipline_rating: bool | None = None


class TradeClose(BaseModel):
    """Exit details for closing a trade."""

    exit_price: float = Field(gt=0)
    exit_date: dt.datetime | None = None
    fees: float = Field(default=0.0, ge=0)
    exit_notes: str | None = Field(default=None, max_length=2000)
    lessons_learned: str | None = Field(default=None, max_length=2000)


class TradeDetail(BaseModel):
    """Trade as returned by the API."""

    trade_id: str
    portfolio_id: str
    strategy_id: str | None
    symbol: str
    direction: Direction
    mode: Mode
    status: Status
    entry_price: float
    quantity: float
    stop_loss: float | None
    take_profit: float | None
    exit_price: float | None
    entry_date: dt.datetime
    exit_date: dt.datetime | None
    gross_pnl: float | None
    fees: float | None
    net_pnl: float | None
    r_multiple: float | None
    setup_notes: str | None
    exit_notes: str | None
    lessons_learned: str | None
    chart_timeframe: str | None
    tags: list[str]
    tilt_score: int | None
    confidence_level: int | None
    stress_level: int | None
    emotion_tags: list[str]
    discipline_rating: bool | None


# ============================================================================
# Statistics
# ============================================================================


def finite_or_none(value: float) -> float | None:
    """JSON has no infinity; unbounded ratios travel as null."""
    return value if math.isfinite(value) else None


class TradingStatsDetail(BaseModel):
    """Headline KPIs.

    profit_factor is null when unbounded (wins and no losses);
    profit_factor_unbounded says so explicitly.
    """

    total_trades: int
    open_trades: int
    closed_trades: int
    winning_trades: int
    losing_trades: int
    breakeven_trades: int
    win_rate: float
    profit_factor: float | None
    profit_factor_unbounded: bool
    net_pnl: float
    total_pnl: float
    total_fees: float
    avg_win: float
    avg_loss: float
    largest_win: float
    largest_loss: float
    expectancy: float
    avg_r_multiple: float
    current_streak: int
    streak_type: Literal["winning", "losing", "none"]
    best_streak: int
    worst_streak: int


class EquityPointDetail(BaseModel):
    """One point of the equity curve."""

    date: dt.date
    pnl: float
    cumulative_pnl: float
    trade_count: int


class GroupPerformanceDetail(BaseModel):
    """Performance of one strategy, symbol or emotion."""

    key: str
    label: str
    total_pnl: float
    win_rate: float
    trades: int
    profit_factor: float | None
    avg_r_multiple: float


class CalendarDay(BaseModel):
    """Calendar cell."""

    date: dt.date
    pnl: float
    trades_count: int
    trade_ids: list[str]


class CalendarMonth(BaseModel):
    """Calendar for one month with header totals."""

    year: int
    month: int
    total_pnl: float
    win_days: int
    loss_days: int
    total_trades: int
    days: list[CalendarDay]


class DashboardDetail(BaseModel):
    """Full dashboard payload."""

    stats: TradingStatsDetail
    equity_curve: list[EquityPointDetail]
    strategies: list[GroupPerformanceDetail]
    symbols: list[GroupPerformanceDetail]


# ============================================================================
# Portfolios & Strategies
# ============================================================================


class PortfolioCreate(BaseModel):
    """New portfolio."""

    name: str = Field(min_length=1, max_length=128)
    portfolio_type: Literal["DEMO", "FUNDED", "PERSONAL", "PROP_FIRM"] = "PERSONAL"
    initial_balance: float = Field(default=0.0, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=8)


class PortfolioDetail(BaseModel):
    """Portfolio with derived balance."""

    portfolio_id: str
    name: str
    portfolio_type: str
    initial_balance: float
    currency: str
    is_default: bool
    net_pnl: float
    balance: float


class StrategyCreate(BaseModel):
    """New strategy."""

    name: str = Field(min_length=1, max_length=128)
    description: str | None = Field(default=None, max_length=2000)


class StrategyDetail(BaseModel):
    """Strategy as returned by the API."""

    strategy_id: str
    name: str
    description: str | None


# ============================================================================
# Goals & Notes
# ============================================================================

GoalKind = Literal["profit", "trades", "winrate", "custom"]
NoteKind = Literal["thought", "lesson", "observation"]


class GoalCreate(BaseModel):
    """New goal. Omitted fields take defaults."""

    title: str | None = Field(default=None, max_length=200)
    target_value: float | None = None
    current_value: float | None = None
    goal_type: GoalKind | None = None
    is_completed: bool | None = None


class GoalUpdate(BaseModel):
    """Partial goal edit."""

    title: str | None = Field(default=None, max_length=200)
    target_value: float | None = None
    current_value: float | None = None
    goal_type: GoalKind | None = None
    is_completed: bool | None = None


class GoalDetail(BaseModel):
    """Goal as returned by the API."""

    goal_id: str
    title: str
    target_value: float
    current_value: float
    goal_type: GoalKind
    is_completed: bool


class NoteCreate(BaseModel):
    """New quick note."""

    content: str = Field(min_length=1, max_length=2000)
    note_type: NoteKind = "thought"


class NoteDetail(BaseModel):
    """Note as returned by the API."""

    note_id: str
    content: str
    note_type: NoteKind
    pinned: bool
    created_at: dt.datetime | None


# ============================================================================
# Assets
# ============================================================================

AssetKind = Literal["FOREX", "CRYPTO", "STOCK", "ETF", "COMMODITY", "INDEX", "OTHER"]


class AssetCreate(BaseModel):
    """New user asset."""

    symbol: str = Field(min_length=1, max_length=20)
    name: str | None = Field(default=None, max_length=128)
    asset_type: AssetKind


class AssetDetail(BaseModel):
    """Asset as returned by the API."""

    asset_id: str
    symbol: str
    name: str | None
    asset_type: AssetKind
    is_default: bool
