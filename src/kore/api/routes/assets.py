"""Assets API endpoint.

GET /api/assets - List assets visible to the caller
POST /api/assets - Add a custom asset
DELETE /api/assets/{asset_id} - Delete one of the caller's own assets
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from kore.api.app import get_current_user_id, get_db_session
from kore.core.errors import ConflictError, NotFoundError
from kore.db.repo import DbSession
from kore.journal import assets as journal
from kore.models.domain import AssetEntity
from kore.models.types import AssetCreate, AssetDetail

router = APIRouter()


def _build_asset_detail(asset: AssetEntity) -> AssetDetail:
    return AssetDetail(
        asset_id=asset.asset_id,
        symbol=asset.symbol,
        name=asset.name,
        asset_type=asset.asset_type,
        is_default=asset.is_default,
    )


@router.get("/assets", response_model=list[AssetDetail])
def list_assets(
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[AssetDetail]:
    """Shared default assets plus the caller's own, defaults first."""
    return [_build_asset_detail(a) for a in journal.list_assets(session, user_id)]


@router.post("/assets", response_model=AssetDetail, status_code=201)
def create_asset(
    payload: AssetCreate,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> AssetDetail:
    """Add a custom asset.

    Raises:
        HTTPException: 409 if the symbol already exists for the caller.
    """
    try:
        asset = journal.create_asset(
            session, user_id, payload.symbol, payload.asset_type, payload.name
        )
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return _build_asset_detail(asset)


@router.delete("/assets/{asset_id}", status_code=204)
def delete_asset(
    asset_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        journal.delete_asset(session, user_id, asset_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return Response(status_code=204)
