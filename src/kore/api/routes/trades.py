"""Trades API endpoint.

GET /api/trades - List trades (filters: status, portfolio_id, limit)
POST /api/trades - Record a trade
GET /api/trades/{trade_id} - Get trade detail
PATCH /api/trades/{trade_id} - Edit a trade
DELETE /api/trades/{trade_id} - Delete a trade
POST /api/trades/{trade_id}/close - Close a trade
POST /api/trades/{trade_id}/cancel - Cancel a trade
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from kore.api.app import get_current_user_id, get_db_session
from kore.core.errors import InvalidStateError, NotFoundError
from kore.db.repo import DbSession
from kore.journal import trades as journal
from kore.journal.trades import TradeInput
from kore.models.domain import TradeEntity, TradeStatus
from kore.models.types import TradeClose, TradeCreate, TradeDetail, TradeUpdate

router = APIRouter()


def build_trade_detail(trade: TradeEntity) -> TradeDetail:
    """Build TradeDetail from TradeEntity."""
    return TradeDetail(
        trade_id=trade.trade_id,
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
        tags=trade.tags,
        tilt_score=trade.tilt_score,
        confidence_level=trade.confidence_level,
        stress_level=trade.stress_level,
        emotion_tags=trade.emotion_tags,
        discipline_rating=trade.discipline_rating,
    )


@router.get("/trades", response_model=list[TradeDetail])
def list_trades(
    status: TradeStatus | None = None,
    portfolio_id: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=1000),
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[TradeDetail]:
    """List the caller's trades, most recent entry first."""
    trades = journal.list_trades(
        session, user_id, status=status, portfolio_id=portfolio_id, limit=limit
    )
    return [build_trade_detail(t) for t in trades]


@router.post("/trades", response_model=TradeDetail, status_code=201)
def create_trade(
    payload: TradeCreate,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> TradeDetail:
    """Record a new trade.

    Raises:
        HTTPException: 404 if the portfolio or strategy is not the caller's.
    """
    trade_input = TradeInput(**payload.model_dump())

    try:
        trade = journal.create_trade(session, user_id, trade_input)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return build_trade_detail(trade)


@router.get("/trades/{trade_id}", response_model=TradeDetail)
def get_trade(
    trade_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> TradeDetail:
    """Get trade detail.

    Raises:
        HTTPException: 404 if trade not found.
    """
    try:
        trade = journal.get_trade(session, user_id, trade_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return build_trade_detail(trade)


@router.patch("/trades/{trade_id}", response_model=TradeDetail)
def update_trade(
    trade_id: str,
    payload: TradeUpdate,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> TradeDetail:
    """Edit a trade. Only fields present in the body are changed."""
    try:
        trade = journal.update_trade(
            session, user_id, trade_id, payload.model_dump(exclude_unset=True)
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return build_trade_detail(trade)


@router.delete("/trades/{trade_id}", status_code=204)
def delete_trade(
    trade_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        journal.delete_trade(session, user_id, trade_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return Response(status_code=204)


@router.post("/trades/{trade_id}/close", response_model=TradeDetail)
def close_trade(
    trade_id: str,
    payload: TradeClose,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> TradeDetail:
    """Close a trade and record its P&L.

    Raises:
        HTTPException: 404 if trade not found, 409 if it is not open or pending.
    """
    try:
        trade = journal.close_trade(
            session,
            user_id,
            trade_id,
            exit_price=payload.exit_price,
            exit_date=payload.exit_date,
            fees=payload.fees,
            exit_notes=payload.exit_notes,
            lessons_learned=payload.lessons_learned,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except InvalidStateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return build_trade_detail(trade)


@router.post("/trades/{trade_id}/cancel", response_model=TradeDetail)
def cancel_trade(
    trade_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> TradeDetail:
    """Cancel a pending or open trade."""
    try:
        trade = journal.cancel_trade(session, user_id, trade_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except InvalidStateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return build_trade_detail(trade)
