"""Tradable assets.

Users see the shared default assets plus their own. Only their own,
non-default assets can be deleted.
"""

from __future__ import annotations

import logging
import uuid

from kore.core.errors import ConflictError, NotFoundError
from kore.db import repo
from kore.db.repo import DbSession
from kore.models.domain import AssetEntity, AssetType

logger = logging.getLogger(__name__)


def normalize_symbol(symbol: str) -> str:
    """Canonical symbol form: trimmed and upper-cased."""
    return symbol.strip().upper()


def list_assets(session: DbSession, user_id: str) -> list[AssetEntity]:
    """Active assets visible to the user, defaults first, then by symbol."""
    return repo.get_assets_for_user(session, user_id)


def create_asset(
    session: DbSession,
    user_id: str,
    symbol: str,
    asset_type: AssetType,
    name: str | None = None,
) -> AssetEntity:
    """Create a user asset.

    Raises:
        ConflictError: If the user or the defaults already have the symbol.
    """
    symbol = normalize_symbol(symbol)
    if repo.find_visible_asset(session, user_id, symbol) is not None:
        raise ConflictError(f"Asset already exists: {symbol}")

    stripped_name = name.strip() if name is not None else ""
    asset = AssetEntity(
        asset_id=str(uuid.uuid4()),
        user_id=user_id,
        symbol=symbol,
        name=stripped_name or None,
        asset_type=asset_type,
        is_default=False,
        is_active=True,
    )
    repo.create_asset(session, asset)
    repo.commit(session)
    logger.info(f"Created asset {symbol} for user {user_id}")
    return asset


def delete_asset(session: DbSession, user_id: str, asset_id: str) -> None:
    """Delete one of the user's own assets.

    Raises:
        NotFoundError: If the asset is missing, a default, or another user's.
    """
    if not repo.delete_user_asset(session, user_id, asset_id):
        raise NotFoundError(f"Asset not found: {asset_id}")
    repo.commit(session)
    logger.info(f"Deleted asset {asset_id}")
