"""Tests for database schema invariants.

1. All journal tables are created
2. User assets unique per (user_id, symbol)
3. P&L columns are nullable until a trade closes
"""

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from kore.db import repo
from kore.db.schema import Asset, Base, Portfolio, Trade
from kore.db.session import DEFAULT_DB_PATH, resolve_db_path


class TestSchemaCreation:
    """Test that schema can be created without errors."""

    def test_all_tables_created(self, engine):
        """All required tables should exist after creation."""
        table_names = Base.metadata.tables.keys()
        expected_tables = {
            "portfolios",
            "strategies",
            "trades",
            "trading_goals",
            "quick_notes",
            "assets",
        }
        assert expected_tables.issubset(table_names)


class TestAssetUniqueness:
    """Invariant: user assets unique per (user_id, symbol)."""

    def test_duplicate_user_asset_rejected(self, session):
        """Same owner and symbol twice should be rejected."""
        session.add(Asset(asset_id="a1", user_id="u1", symbol="AAPL", asset_type="STOCK"))
        session.commit()

        session.add(Asset(asset_id="a2", user_id="u1", symbol="AAPL", asset_type="STOCK"))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_same_symbol_different_owner_allowed(self, session):
        session.add_all(
            [
                Asset(asset_id="a1", user_id="u1", symbol="AAPL", asset_type="STOCK"),
                Asset(asset_id="a2", user_id="u2", symbol="AAPL", asset_type="STOCK"),
            ]
        )
        session.commit()
        assert session.query(Asset).count() == 2


class TestTradeRows:
    """Trade row storage."""

    def test_open_trade_has_null_pnl(self, session):
        session.add(
            Portfolio(portfolio_id="p1", user_id="u1", name="Main", portfolio_type="PERSONAL")
        )
        session.add(
            Trade(
                trade_id="t1",
                user_id="u1",
                portfolio_id="p1",
                symbol="AAPL",
                direction="LONG",
                entry_price=10.0,
                quantity=1.0,
                entry_date=datetime(2024, 1, 1),
            )
        )
        session.commit()

        trade = repo.get_trade(session, "u1", "t1")
        assert trade.status == "OPEN"
        assert trade.mode == "LIVE"
        assert trade.net_pnl is None
        assert trade.tags == []

    def test_trade_scoped_to_owner(self, session):
        session.add(
            Trade(
                trade_id="t1",
                user_id="u1",
                portfolio_id="p1",
                symbol="AAPL",
                direction="LONG",
                entry_price=10.0,
                quantity=1.0,
                entry_date=datetime(2024, 1, 1),
            )
        )
        session.commit()
        assert repo.get_trade(session, "u2", "t1") is None


class TestDbPath:
    """Database path resolution."""

    def test_explicit_path_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KORE_DB_PATH", str(tmp_path / "env.db"))
        assert resolve_db_path(tmp_path / "arg.db") == tmp_path / "arg.db"

    def test_env_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KORE_DB_PATH", str(tmp_path / "env.db"))
        assert resolve_db_path() == tmp_path / "env.db"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("KORE_DB_PATH", raising=False)
        assert resolve_db_path() == DEFAULT_DB_PATH
