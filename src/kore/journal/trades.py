"""Trade lifecycle for the journal.

Handles trade creation, edits, closing (P&L and R-multiple derivation),
cancellation and deletion. Domain logic is pure - database operations
go through repo.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from kore.core.errors import InvalidStateError, NotFoundError
from kore.db import repo
from kore.db.repo import DbSession
from kore.models.domain import TradeDirection, TradeEntity, TradeMode, TradeStatus

logger = logging.getLogger(__name__)

# Statuses a trade can still be closed or cancelled from
ACTIVE_STATUSES = ("PENDING", "OPEN")

# Columns an edit may change but never clear
REQUIRED_FIELDS = (
    "portfolio_id",
    "symbol",
    "direction",
    "mode",
    "entry_price",
    "quantity",
    "entry_date",
)

# Edits to these change the result of a closed trade
RESULT_INPUTS = ("direction", "entry_price", "quantity", "stop_loss")


@dataclass
class TradeInput:
    """Input for trade creation."""

    portfolio_id: str
    symbol: str
    direction: TradeDirection
    entry_price: float
    quantity: float
    entry_date: datetime
    mode: TradeMode = "LIVE"
    status: TradeStatus = "OPEN"
    strategy_id: str | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    setup_notes: str | None = None
    chart_timeframe: str | None = None
    tags: list[str] = field(default_factory=list)
    tilt_score: int | None = None
    confidence_level: int | None = None
    stress_level: int | None = None
    emotion_tags: list[str] = field(default_factory=list)
    discipline_rating: bool | None = None


@dataclass
class TradeResult:
    """P&L derived when a trade is closed."""

    gross_pnl: float
    net_pnl: float
    r_multiple: float | None


def to_utc_naive(value: datetime) -> datetime:
    """Normalize a timestamp to naive UTC, the storage convention."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def compute_trade_result(
    direction: TradeDirection,
    entry_price: float,
    exit_price: float,
    quantity: float,
    fees: float,
    stop_loss: float | None,
) -> TradeResult:
    """Derive P&L and R-multiple for a closed trade.

    Pure function - no database access.

    Args:
        direction: LONG or SHORT.
        entry_price: Fill price at entry.
        exit_price: Fill price at exit.
        quantity: Position size.
        fees: Total commissions and fees (subtracted from gross).
        stop_loss: Initial stop; defines 1R.

    Returns:
        TradeResult. r_multiple is None without a usable stop distance.
    """
    side = 1.0 if direction == "LONG" else -1.0
    move = (exit_price - entry_price) * side
    gross_pnl = move * quantity
    net_pnl = gross_pnl - fees

    r_multiple = None
    if stop_loss is not None:
        risk = abs(entry_price - stop_loss)
        if risk > 0:
            r_multiple = move / risk

    return TradeResult(gross_pnl=gross_pnl, net_pnl=net_pnl, r_multiple=r_multiple)


def _check_references(
    session: DbSession, user_id: str, portfolio_id: str | None, strategy_id: str | None
) -> None:
    """Ensure referenced portfolio/strategy exist and belong to the user."""
    if portfolio_id is not None and repo.get_portfolio(session, user_id, portfolio_id) is None:
        raise NotFoundError(f"Portfolio not found: {portfolio_id}")
    if strategy_id is not None and repo.get_strategy(session, user_id, strategy_id) is None:
        raise NotFoundError(f"Strategy not found: {strategy_id}")


def create_trade(session: DbSession, user_id: str, trade_input: TradeInput) -> TradeEntity:
    """Record a new trade.

    Args:
        session: Database session.
        user_id: Owner of the trade.
        trade_input: Trade data.

    Returns:
        The created TradeEntity.

    Raises:
        NotFoundError: If portfolio or strategy is not the user's.
    """
    _check_references(session, user_id, trade_input.portfolio_id, trade_input.strategy_id)

    trade = TradeEntity(
        trade_id=str(uuid.uuid4()),
        user_id=user_id,
        portfolio_id=trade_input.portfolio_id,
        strategy_id=trade_input.strategy_id,
        symbol=trade_input.symbol.strip().upper(),
        direction=trade_input.direction,
        mode=trade_input.mode,
        status=trade_input.status,
        entry_price=trade_input.entry_price,
        quantity=trade_input.quantity,
        stop_loss=trade_input.stop_loss,
        take_profit=trade_input.take_profit,
        entry_date=to_utc_naive(trade_input.entry_date),
        setup_notes=trade_input.setup_notes,
        chart_timeframe=trade_input.chart_timeframe,
        tags=list(trade_input.tags),
        tilt_score=trade_input.tilt_score,
        confidence_level=trade_input.confidence_level,
        stress_level=trade_input.stress_level,
        emotion_tags=list(trade_input.emotion_tags),
        discipline_rating=trade_input.discipline_rating,
    )

    repo.create_trade(session, trade)
    repo.commit(session)
    logger.info(f"Created trade {trade.trade_id} ({trade.symbol} {trade.direction})")

    return trade


def get_trade(session: DbSession, user_id: str, trade_id: str) -> TradeEntity:
    """Get one trade.

    Raises:
        NotFoundError: If the user has no such trade.
    """
    trade = repo.get_trade(session, user_id, trade_id)
    if trade is None:
        raise NotFoundError(f"Trade not found: {trade_id}")
    return trade


def list_trades(
    session: DbSession,
    user_id: str,
    *,
    status: TradeStatus | None = None,
    portfolio_id: str | None = None,
    limit: int | None = None,
) -> list[TradeEntity]:
    """List the user's trades, most recent entry first."""
    return repo.get_trades_for_user(
        session, user_id, portfolio_id=portfolio_id, status=status, limit=limit
    )


def update_trade(
    session: DbSession, user_id: str, trade_id: str, changes: dict[str, Any]
) -> TradeEntity:
    """Apply a partial update.

    Only keys present in changes are written; None for a required
    column is ignored. Editing direction, entry price, quantity or stop
    of a closed trade recomputes its P&L and R-multiple. Status changes
    go through close_trade / cancel_trade instead.

    Raises:
        NotFoundError: If trade, or a newly referenced portfolio or
            strategy, does not belong to the user.
    """
    trade = get_trade(session, user_id, trade_id)
    fields = {
        name: value
        for name, value in changes.items()
        if not (name in REQUIRED_FIELDS and value is None)
    }
    _check_references(session, user_id, fields.get("portfolio_id"), fields.get("strategy_id"))

    if "symbol" in fields:
        fields["symbol"] = fields["symbol"].strip().upper()
    for date_field in ("entry_date", "exit_date"):
        if fields.get(date_field) is not None:
            fields[date_field] = to_utc_naive(fields[date_field])

    if trade.status == "CLOSED" and any(name in fields for name in RESULT_INPUTS):
        fields.update(_recompute_result(trade, fields))

    updated = repo.update_trade(session, user_id, trade_id, fields)
    repo.commit(session)
    logger.info(f"Updated trade {trade_id}: {sorted(fields)}")
    return updated


def _recompute_result(trade: TradeEntity, fields: dict[str, Any]) -> dict[str, Any]:
    """Derived P&L columns for a closed trade after an edit."""
    result = compute_trade_result(
        direction=fields.get("direction", trade.direction),
        entry_price=fields.get("entry_price", trade.entry_price),
        exit_price=trade.exit_price if trade.exit_price is not None else 0.0,
        quantity=fields.get("quantity", trade.quantity),
        fees=trade.fees if trade.fees is not None else 0.0,
        stop_loss=fields.get("stop_loss", trade.stop_loss),
    )
    return {
        "gross_pnl": result.gross_pnl,
        "net_pnl": result.net_pnl,
        "r_multiple": result.r_multiple,
    }


def close_trade(
    session: DbSession,
    user_id: str,
    trade_id: str,
    *,
    exit_price: float,
    exit_date: datetime | None = None,
    fees: float = 0.0,
    exit_notes: str | None = None,
    lessons_learned: str | None = None,
) -> TradeEntity:
    """Close an open or pending trade and record its result.

    Args:
        session: Database session.
        user_id: Owner of the trade.
        trade_id: Trade to close.
        exit_price: Fill price at exit.
        exit_date: Exit timestamp; defaults to now (UTC).
        fees: Total fees for the round trip.
        exit_notes: Optional exit commentary.
        lessons_learned: Optional review notes.

    Returns:
        Updated TradeEntity with status CLOSED.

    Raises:
        NotFoundError: If the user has no such trade.
        InvalidStateError: If the trade is already closed or cancelled.
    """
    trade = get_trade(session, user_id, trade_id)
    if trade.status not in ACTIVE_STATUSES:
        logger.warning(f"Refused to close trade {trade_id} in status {trade.status}")
        raise InvalidStateError(f"Cannot close trade in status {trade.status}")

    result = compute_trade_result(
        direction=trade.direction,
        entry_price=trade.entry_price,
        exit_price=exit_price,
        quantity=trade.quantity,
        fees=fees,
        stop_loss=trade.stop_loss,
    )

    if exit_date is None:
        exit_date = datetime.now(timezone.utc)

    fields: dict[str, Any] = {
        "status": "CLOSED",
        "exit_price": exit_price,
        "exit_date": to_utc_naive(exit_date),
        "fees": fees,
        "gross_pnl": result.gross_pnl,
        "net_pnl": result.net_pnl,
        "r_multiple": result.r_multiple,
    }
    if exit_notes is not None:
        fields["exit_notes"] = exit_notes
    if lessons_learned is not None:
        fields["lessons_learned"] = lessons_learned

    updated = repo.update_trade(session, user_id, trade_id, fields)
    repo.commit(session)
    logger.info(f"Closed trade {trade_id}: net_pnl={result.net_pnl:.2f}")

    return updated


def cancel_trade(session: DbSession, user_id: str, trade_id: str) -> TradeEntity:
    """Cancel a pending or open trade.

    Raises:
        NotFoundError: If the user has no such trade.
        InvalidStateError: If the trade is already closed or cancelled.
    """
    trade = get_trade(session, user_id, trade_id)
    if trade.status not in ACTIVE_STATUSES:
        logger.warning(f"Refused to cancel trade {trade_id} in status {trade.status}")
        raise InvalidStateError(f"Cannot cancel trade in status {trade.status}")

    updated = repo.update_trade(session, user_id, trade_id, {"status": "CANCELLED"})
    repo.commit(session)
    logger.info(f"Cancelled trade {trade_id}")

    return updated


def delete_trade(session: DbSession, user_id: str, trade_id: str) -> None:
    """Delete a trade.

    Raises:
        NotFoundError: If the user has no such trade.
    """
    if not repo.delete_trade(session, user_id, trade_id):
        raise NotFoundError(f"Trade not found: {trade_id}")
    repo.commit(session)
    logger.info(f"Deleted trade {trade_id}")
