"""Domain models for Kore.

Pure Python dataclasses representing domain entities.
These models are independent of SQLAlchemy and used throughout
the application for clean separation from the database layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal


# ============================================================================
# Trade Domain
# ============================================================================

TradeDirection = Literal["LONG", "SHORT"]
TradeStatus = Literal["PENDING", "OPEN", "CLOSED", "CANCELLED"]
TradeMode = Literal["LIVE", "BACKTEST"]


@dataclass
class TradeEntity:
    """Domain model for a journal trade.

    Money fields are None until known: P&L is only set once the
    trade is closed, r_multiple only when a stop distance exists.
    """

    trade_id: str
    user_id: str
    portfolio_id: str
    symbol: str
    direction: TradeDirection
    status: TradeStatus
    entry_price: float
    quantity: float
    entry_date: datetime
    mode: TradeMode = "LIVE"
    strategy_id: str | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    exit_price: float | None = None
    exit_date: datetime | None = None
    gross_pnl: float | None = None
    fees: float | None = None
    net_pnl: float | None = None
    r_multiple: float | None = None
    setup_notes: str | None = None
    exit_notes: str | None = None
    lessons_learned: str | None = None
    chart_timeframe: str | None = None
    tags: list[str] = field(default_factory=list)
    tilt_score: int | None = None
    confidence_level: int | None = None
    stress_level: int | None = None
    emotion_tags: list[str] = field(default_factory=list)
    discipline_rating: bool | None = None


# ============================================================================
# Portfolio / Strategy Domain
# ============================================================================

PortfolioType = Literal["DEMO", "FUNDED", "PERSONAL", "PROP_FIRM"]


@dataclass
class PortfolioEntity:
    """Domain model for a trading account."""

    portfolio_id: str
    user_id: str
    name: str
    portfolio_type: PortfolioType
    initial_balance: float
    currency: str
    is_default: bool = False


@dataclass
class StrategyEntity:
    """Domain model for a playbook strategy."""

    strategy_id: str
    user_id: str
    name: str
    description: str | None = None


# ============================================================================
# Goals & Notes Domain
# ============================================================================

GoalType = Literal["profit", "trades", "winrate", "custom"]
NoteType = Literal["thought", "lesson", "observation"]


@dataclass
class GoalEntity:
    """Domain model for a trading goal."""

    goal_id: str
    user_id: str
    title: str
    target_value: float
    current_value: float
    goal_type: GoalType
    is_completed: bool = False


@dataclass
class NoteEntity:
    """Domain model for a quick note."""

    note_id: str
    user_id: str
    content: str
    note_type: NoteType
    pinned: bool = False
    created_at: datetime | None = None


# ============================================================================
# Asset Domain
# ============================================================================

AssetType = Literal["FOREX", "CRYPTO", "STOCK", "ETF", "COMMODITY", "INDEX", "OTHER"]


@dataclass
class AssetEntity:
    """Domain model for a tradable asset.

    user_id is None for shared default assets.
    """

    asset_id: str
    symbol: str
    asset_type: AssetType
    user_id: str | None = None
    name: str | None = None
    is_default: bool = False
    is_active: bool = True
