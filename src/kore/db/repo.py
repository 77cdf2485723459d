"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping domain logic pure.
Returns domain models (not SQLAlchemy entities) to external callers.
Every query on user-owned rows is filtered by user_id.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from kore.db.schema import Asset, Portfolio, QuickNote, Strategy, Trade, TradingGoal
from kore.models.domain import (
    AssetEntity,
    GoalEntity,
    NoteEntity,
    PortfolioEntity,
    StrategyEntity,
    TradeEntity,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession"]


# ============================================================================
# Converters: SQLAlchemy -> Domain
# ============================================================================


def _load_list(value: str | None) -> list[str]:
    return json.loads(value) if value else []


def _dump_list(values: list[str]) -> str | None:
    return json.dumps(values) if values else None


def _trade_to_entity(trade: Trade) -> TradeEntity:
    """Convert SQLAlchemy Trade to domain entity."""
    return TradeEntity(
        trade_id=trade.trade_id,
        user_id=trade.user_id,
        portfolio_id=trade.portfolio_id,
        strategy_id=trade.strategy_id,
        symbol=trade.symbol,
        direction=trade.direction,
        mode=trade.mode,
        status=trade.status,
        entry_price=trade.entry_price,
        quantity=trade.quantity,
        stop_loss=trade.stop_loss,
        take_profit=trade.take_profit,
        exit_price=trade.exit_price,
        entry_date=trade.entry_date,
        exit_date=trade.exit_date,
        gross_pnl=trade.gross_pnl,
        fees=trade.fees,
        net_pnl=trade.net_pnl,
        r_multiple=trade.r_multiple,
        setup_notes=trade.setup_notes,
        exit_notes=trade.exit_notes,
        lessons_learned=trade.lessons_learned,
        chart_timeframe=trade.chart_timeframe,
        tags=_load_list(trade.tags_json),
        tilt_score=trade.tilt_score,
        confidence_level=trade.confidence_level,
        stress_level=trade.stress_level,
        emotion_tags=_load_list(trade.emotion_tags_json),
        discipline_rating=trade.discipline_rating,
    )


def _portfolio_to_entity(portfolio: Portfolio) -> PortfolioEntity:
    """Convert SQLAlchemy Portfolio to domain entity."""
    return PortfolioEntity(
        portfolio_id=portfolio.portfolio_id,
        user_id=portfolio.user_id,
        name=portfolio.name,
        portfolio_type=portfolio.portfolio_type,
        initial_balance=portfolio.initial_balance,
        currency=portfolio.currency,
        is_default=portfolio.is_default,
    )


def _strategy_to_entity(strategy: Strategy) -> StrategyEntity:
    """Convert SQLAlchemy Strategy to domain entity."""
    return StrategyEntity(
        strategy_id=strategy.strategy_id,
        user_id=strategy.user_id,
        name=strategy.name,
        description=strategy.description,
    )


def _goal_to_entity(goal: TradingGoal) -> GoalEntity:
    """Convert SQLAlchemy TradingGoal to domain entity."""
    return GoalEntity(
        goal_id=goal.goal_id,
        user_id=goal.user_id,
        title=goal.title,
        target_value=goal.target_value,
        current_value=goal.current_value,
        goal_type=goal.goal_type,
        is_completed=goal.is_completed,
    )


def _note_to_entity(note: QuickNote) -> NoteEntity:
    """Convert SQLAlchemy QuickNote to domain entity."""
    return NoteEntity(
        note_id=note.note_id,
        user_id=note.user_id,
        content=note.content,
        note_type=note.note_type,
        pinned=note.pinned,
        created_at=note.created_at,
    )


def _asset_to_entity(asset: Asset) -> AssetEntity:
    """Convert SQLAlchemy Asset to domain entity."""
    return AssetEntity(
        asset_id=asset.asset_id,
        user_id=asset.user_id,
        symbol=asset.symbol,
        name=asset.name,
        asset_type=asset.asset_type,
        is_default=asset.is_default,
        is_active=asset.is_active,
    )


# ============================================================================
# Trade Repository
# ============================================================================


def _get_trade_row(session: DbSession, user_id: str, trade_id: str) -> Trade | None:
    return (
        session.query(Trade)
        .filter(Trade.trade_id == trade_id, Trade.user_id == user_id)
        .first()
    )


def get_trade(session: DbSession, user_id: str, trade_id: str) -> TradeEntity | None:
    """Get one of the user's trades by ID."""
    trade = _get_trade_row(session, user_id, trade_id)
    return _trade_to_entity(trade) if trade else None


def get_trades_for_user(
    session: DbSession,
    user_id: str,
    *,
    portfolio_id: str | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> list[TradeEntity]:
    """Get the user's trades, most recent entry first."""
    query = session.query(Trade).filter(Trade.user_id == user_id)
    if portfolio_id is not None:
        query = query.filter(Trade.portfolio_id == portfolio_id)
    if status is not None:
        query = query.filter(Trade.status == status)
    query = query.order_by(Trade.entry_date.desc(), Trade.trade_id)
    if limit is not None:
        query = query.limit(limit)
    return [_trade_to_entity(t) for t in query.all()]


def create_trade(session: DbSession, entity: TradeEntity) -> TradeEntity:
    """Create a new trade."""
    trade = Trade(
        trade_id=entity.trade_id,
        user_id=entity.user_id,
        portfolio_id=entity.portfolio_id,
        strategy_id=entity.strategy_id,
        symbol=entity.symbol,
        direction=entity.direction,
        mode=entity.mode,
        status=entity.status,
        entry_price=entity.entry_price,
        quantity=entity.quantity,
        stop_loss=entity.stop_loss,
        take_profit=entity.take_profit,
        exit_price=entity.exit_price,
        entry_date=entity.entry_date,
        exit_date=entity.exit_date,
        gross_pnl=entity.gross_pnl,
        fees=entity.fees,
        net_pnl=entity.net_pnl,
        r_multiple=entity.r_multiple,
        setup_notes=entity.setup_notes,
        exit_notes=entity.exit_notes,
        lessons_learned=entity.lessons_learned,
        chart_timeframe=entity.chart_timeframe,
        tags_json=_dump_list(entity.tags),
        tilt_score=entity.tilt_score,
        confidence_level=entity.confidence_level,
        stress_level=entity.stress_level,
        emotion_tags_json=_dump_list(entity.emotion_tags),
        discipline_rating=entity.discipline_rating,
    )
    session.add(trade)
    return entity


def update_trade(
    session: DbSession, user_id: str, trade_id: str, fields: dict[str, Any]
) -> TradeEntity | None:
    """Set the given trade columns. List fields are named tags/emotion_tags.

    Returns:
        Updated entity, or None if the user has no such trade.
    """
    trade = _get_trade_row(session, user_id, trade_id)
    if trade is None:
        return None
    for name, value in fields.items():
        if name in ("tags", "emotion_tags"):
            setattr(trade, f"{name}_json", _dump_list(value))
        else:
            setattr(trade, name, value)
    session.flush()
    return _trade_to_entity(trade)


def delete_trade(session: DbSession, user_id: str, trade_id: str) -> bool:
    """Delete a trade. Returns False if the user has no such trade."""
    deleted = (
        session.query(Trade)
        .filter(Trade.trade_id == trade_id, Trade.user_id == user_id)
        .delete(synchronize_session=False)
    )
    return deleted > 0


# ============================================================================
# Portfolio Repository
# ============================================================================


def get_portfolio(session: DbSession, user_id: str, portfolio_id: str) -> PortfolioEntity | None:
    """Get one of the user's portfolios by ID."""
    portfolio = (
        session.query(Portfolio)
        .filter(Portfolio.portfolio_id == portfolio_id, Portfolio.user_id == user_id)
        .first()
    )
    return _portfolio_to_entity(portfolio) if portfolio else None


def get_portfolios_for_user(session: DbSession, user_id: str) -> list[PortfolioEntity]:
    """Get the user's portfolios, default first."""
    portfolios = (
        session.query(Portfolio)
        .filter(Portfolio.user_id == user_id)
        .order_by(Portfolio.is_default.desc(), Portfolio.name)
        .all()
    )
    return [_portfolio_to_entity(p) for p in portfolios]


def count_portfolios_for_user(session: DbSession, user_id: str) -> int:
    """Count the user's portfolios."""
    return session.query(Portfolio).filter(Portfolio.user_id == user_id).count()


def promote_oldest_portfolio(session: DbSession, user_id: str) -> PortfolioEntity | None:
    """Mark the user's oldest portfolio as default. Returns None if none left."""
    portfolio = (
        session.query(Portfolio)
        .filter(Portfolio.user_id == user_id)
        .order_by(Portfolio.created_at, Portfolio.portfolio_id)
        .first()
    )
    if portfolio is None:
        return None
    portfolio.is_default = True
    session.flush()
    return _portfolio_to_entity(portfolio)


def create_portfolio(session: DbSession, entity: PortfolioEntity) -> PortfolioEntity:
    """Create a new portfolio."""
    portfolio = Portfolio(
        portfolio_id=entity.portfolio_id,
        user_id=entity.user_id,
        name=entity.name,
        portfolio_type=entity.portfolio_type,
        initial_balance=entity.initial_balance,
        currency=entity.currency,
        is_default=entity.is_default,
    )
    session.add(portfolio)
    return entity


def delete_portfolio(session: DbSession, user_id: str, portfolio_id: str) -> bool:
    """Delete a portfolio and its trades. Returns False if not found."""
    deleted = (
        session.query(Portfolio)
        .filter(Portfolio.portfolio_id == portfolio_id, Portfolio.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if deleted:
        session.query(Trade).filter(
            Trade.portfolio_id == portfolio_id, Trade.user_id == user_id
        ).delete(synchronize_session=False)
    return deleted > 0


# ============================================================================
# Strategy Repository
# ============================================================================


def get_strategy(session: DbSession, user_id: str, strategy_id: str) -> StrategyEntity | None:
    """Get one of the user's strategies by ID."""
    strategy = (
        session.query(Strategy)
        .filter(Strategy.strategy_id == strategy_id, Strategy.user_id == user_id)
        .first()
    )
    return _strategy_to_entity(strategy) if strategy else None


def get_strategies_for_user(session: DbSession, user_id: str) -> list[StrategyEntity]:
    """Get the user's strategies by name."""
    strategies = (
        session.query(Strategy)
        .filter(Strategy.user_id == user_id)
        .order_by(Strategy.name)
        .all()
    )
    return [_strategy_to_entity(s) for s in strategies]


def create_strategy(session: DbSession, entity: StrategyEntity) -> StrategyEntity:
    """Create a new strategy."""
    strategy = Strategy(
        strategy_id=entity.strategy_id,
        user_id=entity.user_id,
        name=entity.name,
        description=entity.description,
    )
    session.add(strategy)
    return entity


def delete_strategy(session: DbSession, user_id: str, strategy_id: str) -> bool:
    """Delete a strategy and untag its trades. Returns False if not found."""
    deleted = (
        session.query(Strategy)
        .filter(Strategy.strategy_id == strategy_id, Strategy.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if deleted:
        session.query(Trade).filter(
            Trade.strategy_id == strategy_id, Trade.user_id == user_id
        ).update({Trade.strategy_id: None}, synchronize_session=False)
    return deleted > 0


# ============================================================================
# Goal Repository
# ============================================================================


def get_goals_for_user(session: DbSession, user_id: str) -> list[GoalEntity]:
    """Get the user's goals, newest first."""
    goals = (
        session.query(TradingGoal)
        .filter(TradingGoal.user_id == user_id)
        .order_by(TradingGoal.created_at.desc(), TradingGoal.goal_id)
        .all()
    )
    return [_goal_to_entity(g) for g in goals]


def create_goal(session: DbSession, entity: GoalEntity) -> GoalEntity:
    """Create a new goal."""
    goal = TradingGoal(
        goal_id=entity.goal_id,
        user_id=entity.user_id,
        title=entity.title,
        target_value=entity.target_value,
        current_value=entity.current_value,
        goal_type=entity.goal_type,
        is_completed=entity.is_completed,
    )
    session.add(goal)
    return entity


def update_goal(
    session: DbSession, user_id: str, goal_id: str, fields: dict[str, Any]
) -> GoalEntity | None:
    """Set the given goal columns. Returns None if not found."""
    goal = (
        session.query(TradingGoal)
        .filter(TradingGoal.goal_id == goal_id, TradingGoal.user_id == user_id)
        .first()
    )
    if goal is None:
        return None
    for name, value in fields.items():
        setattr(goal, name, value)
    session.flush()
    return _goal_to_entity(goal)


def delete_goal(session: DbSession, user_id: str, goal_id: str) -> bool:
    """Delete a goal. Returns False if not found."""
    deleted = (
        session.query(TradingGoal)
        .filter(TradingGoal.goal_id == goal_id, TradingGoal.user_id == user_id)
        .delete(synchronize_session=False)
    )
    return deleted > 0


# ============================================================================
# Note Repository
# ============================================================================


def get_notes_for_user(session: DbSession, user_id: str) -> list[NoteEntity]:
    """Get the user's notes, pinned first, then newest."""
    notes = (
        session.query(QuickNote)
        .filter(QuickNote.user_id == user_id)
        .order_by(QuickNote.pinned.desc(), QuickNote.created_at.desc(), QuickNote.note_id)
        .all()
    )
    return [_note_to_entity(n) for n in notes]


def create_note(session: DbSession, entity: NoteEntity) -> NoteEntity:
    """Create a new note."""
    note = QuickNote(
        note_id=entity.note_id,
        user_id=entity.user_id,
        content=entity.content,
        note_type=entity.note_type,
        pinned=entity.pinned,
    )
    session.add(note)
    session.flush()
    return _note_to_entity(note)


def toggle_note_pin(session: DbSession, user_id: str, note_id: str) -> NoteEntity | None:
    """Flip the pinned flag. Returns None if not found."""
    note = (
        session.query(QuickNote)
        .filter(QuickNote.note_id == note_id, QuickNote.user_id == user_id)
        .first()
    )
    if note is None:
        return None
    note.pinned = not note.pinned
    session.flush()
    return _note_to_entity(note)


def delete_note(session: DbSession, user_id: str, note_id: str) -> bool:
    """Delete a note. Returns False if not found."""
    deleted = (
        session.query(QuickNote)
        .filter(QuickNote.note_id == note_id, QuickNote.user_id == user_id)
        .delete(synchronize_session=False)
    )
    return deleted > 0


# ============================================================================
# Asset Repository
# ============================================================================


def get_assets_for_user(session: DbSession, user_id: str) -> list[AssetEntity]:
    """Get active assets visible to the user: own plus defaults."""
    assets = (
        session.query(Asset)
        .filter(
            or_(Asset.user_id == user_id, Asset.user_id.is_(None)),
            Asset.is_active.is_(True),
        )
        .order_by(Asset.is_default.desc(), Asset.symbol)
        .all()
    )
    return [_asset_to_entity(a) for a in assets]


def find_visible_asset(session: DbSession, user_id: str, symbol: str) -> AssetEntity | None:
    """Find an own or default asset with this symbol."""
    asset = (
        session.query(Asset)
        .filter(
            or_(Asset.user_id == user_id, Asset.user_id.is_(None)),
            Asset.symbol == symbol,
        )
        .first()
    )
    return _asset_to_entity(asset) if asset else None


def create_asset(session: DbSession, entity: AssetEntity) -> AssetEntity:
    """Create a new asset."""
    asset = Asset(
        asset_id=entity.asset_id,
        user_id=entity.user_id,
        symbol=entity.symbol,
        name=entity.name,
        asset_type=entity.asset_type,
        is_default=entity.is_default,
        is_active=entity.is_active,
    )
    session.add(asset)
    return entity


def delete_user_asset(session: DbSession, user_id: str, asset_id: str) -> bool:
    """Delete one of the user's own, non-default assets."""
    deleted = (
        session.query(Asset)
        .filter(
            Asset.asset_id == asset_id,
            Asset.user_id == user_id,
            Asset.is_default.is_(False),
        )
        .delete(synchronize_session=False)
    )
    return deleted > 0


# ============================================================================
# Batch Operations
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    session.commit()
