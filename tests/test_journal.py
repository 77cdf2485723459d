"""Tests for portfolios, strategies, goals, notes and assets."""

import logging
from datetime import datetime, timedelta

import pytest

from kore.core.errors import ConflictError, NotFoundError
from kore.db import repo
from kore.journal import assets, goals_notes, portfolios
from kore.journal.trades import TradeInput, close_trade, create_trade, get_trade, list_trades
from kore.models.domain import AssetEntity

USER = "user-1"
OTHER = "user-2"


def closed_trade(session, portfolio_id, exit_price, strategy_id=None, day=0):
    entry_date = datetime(2024, 2, 1, 10, 0) + timedelta(days=day)
    trade = create_trade(
        session,
        USER,
        TradeInput(
            portfolio_id=portfolio_id,
            strategy_id=strategy_id,
            symbol="SPY",
            direction="LONG",
            entry_price=100.0,
            quantity=1.0,
            entry_date=entry_date,
        ),
    )
    return close_trade(
        session,
        USER,
        trade.trade_id,
        exit_price=exit_price,
        exit_date=entry_date + timedelta(hours=1),
    )


class TestPortfolios:
    """Portfolio creation, balances and deletion."""

    def test_first_portfolio_is_default(self, session):
        first = portfolios.create_portfolio(session, USER, "Main", currency="usd")
        second = portfolios.create_portfolio(session, USER, "Prop", "PROP_FIRM")
        assert first.is_default is True
        assert second.is_default is False
        assert first.currency == "USD"

    def test_other_user_gets_own_default(self, session):
        portfolios.create_portfolio(session, USER, "Main")
        assert portfolios.create_portfolio(session, OTHER, "Mine").is_default is True

    def test_balance_includes_closed_pnl(self, session):
        portfolio = portfolios.create_portfolio(session, USER, "Main", initial_balance=1000.0)
        closed_trade(session, portfolio.portfolio_id, 110.0)
        closed_trade(session, portfolio.portfolio_id, 95.0, day=1)

        [entry] = portfolios.list_portfolios(session, USER)
        assert entry.net_pnl == 5.0
        assert entry.balance == 1005.0

    def test_delete_removes_trades(self, session):
        portfolio = portfolios.create_portfolio(session, USER, "Main")
        trade = closed_trade(session, portfolio.portfolio_id, 110.0)
        portfolios.delete_portfolio(session, USER, portfolio.portfolio_id)

        assert portfolios.list_portfolios(session, USER) == []
        with pytest.raises(NotFoundError):
            get_trade(session, USER, trade.trade_id)

    def test_deleting_default_promotes_remaining(self, session):
        """Another portfolio becomes default when the default is deleted."""
        main = portfolios.create_portfolio(session, USER, "Main")
        prop = portfolios.create_portfolio(session, USER, "Prop")
        portfolios.create_portfolio(session, OTHER, "Theirs")

        portfolios.delete_portfolio(session, USER, main.portfolio_id)

        [entry] = portfolios.list_portfolios(session, USER)
        assert entry.portfolio.portfolio_id == prop.portfolio_id
        assert entry.portfolio.is_default is True

    def test_deleting_non_default_keeps_default(self, session):
        main = portfolios.create_portfolio(session, USER, "Main")
        prop = portfolios.create_portfolio(session, USER, "Prop")

        portfolios.delete_portfolio(session, USER, prop.portfolio_id)

        [entry] = portfolios.list_portfolios(session, USER)
        assert entry.portfolio.portfolio_id == main.portfolio_id
        assert entry.portfolio.is_default is True

    def test_delete_other_users_portfolio(self, session):
        portfolio = portfolios.create_portfolio(session, USER, "Main")
        with pytest.raises(NotFoundError):
            portfolios.delete_portfolio(session, OTHER, portfolio.portfolio_id)


class TestStrategies:
    """Strategy playbook."""

    def test_create_and_list(self, session):
        portfolios.create_strategy(session, USER, " Breakout ", "Range break")
        [strategy] = portfolios.list_strategies(session, USER)
        assert strategy.name == "Breakout"
        assert strategy.description == "Range break"
        assert portfolios.list_strategies(session, OTHER) == []

    def test_delete_untags_trades(self, session):
        portfolio = portfolios.create_portfolio(session, USER, "Main")
        strategy = portfolios.create_strategy(session, USER, "Breakout")
        trade = closed_trade(session, portfolio.portfolio_id, 101.0, strategy.strategy_id)

        portfolios.delete_strategy(session, USER, strategy.strategy_id)

        assert get_trade(session, USER, trade.trade_id).strategy_id is None
        assert len(list_trades(session, USER)) == 1

    def test_delete_missing(self, session):
        with pytest.raises(NotFoundError):
            portfolios.delete_strategy(session, USER, "missing")


class TestGoals:
    """Goals and progress refresh."""

    def test_defaults(self, session):
        goal = goals_notes.create_goal(session, USER)
        assert goal.title == "New goal"
        assert goal.target_value == 0.0
        assert goal.goal_type == "custom"
        assert goal.is_completed is False

    def test_update_and_delete(self, session):
        goal = goals_notes.create_goal(session, USER, title="Journal daily")
        updated = goals_notes.update_goal(session, USER, goal.goal_id, {"is_completed": True})
        assert updated.is_completed is True

        goals_notes.delete_goal(session, USER, goal.goal_id)
        assert goals_notes.list_goals(session, USER) == []

    def test_update_other_users_goal(self, session):
        goal = goals_notes.create_goal(session, USER)
        with pytest.raises(NotFoundError):
            goals_notes.update_goal(session, OTHER, goal.goal_id, {"title": "x"})

    def test_refresh_progress(self, session):
        portfolio = portfolios.create_portfolio(session, USER, "Main")
        closed_trade(session, portfolio.portfolio_id, 120.0)
        closed_trade(session, portfolio.portfolio_id, 90.0, day=1)

        goals_notes.create_goal(session, USER, title="p", target_value=10, goal_type="profit")
        goals_notes.create_goal(session, USER, title="t", target_value=5, goal_type="trades")
        goals_notes.create_goal(session, USER, title="w", target_value=50, goal_type="winrate")
        goals_notes.create_goal(
            session, USER, title="c", target_value=1, current_value=0.5, goal_type="custom"
        )

        by_title = {g.title: g for g in goals_notes.refresh_goal_progress(session, USER)}
        assert by_title["p"].current_value == 10.0
        assert by_title["p"].is_completed is True
        assert by_title["t"].current_value == 2.0
        assert by_title["t"].is_completed is False
        assert by_title["w"].current_value == 50.0
        assert by_title["w"].is_completed is True
        assert by_title["c"].current_value == 0.5
        assert by_title["c"].is_completed is False


class TestNotes:
    """Quick notes."""

    def test_create_defaults(self, session):
        note = goals_notes.create_note(session, USER, "Size down on Fridays")
        assert note.note_type == "thought"
        assert note.pinned is False
        assert note.created_at is not None

    def test_pinned_first(self, session):
        first = goals_notes.create_note(session, USER, "first", "lesson")
        goals_notes.create_note(session, USER, "second")
        goals_notes.toggle_pin(session, USER, first.note_id)

        notes = goals_notes.list_notes(session, USER)
        assert notes[0].note_id == first.note_id
        assert notes[0].pinned is True

    def test_toggle_twice_unpins(self, session):
        note = goals_notes.create_note(session, USER, "x")
        goals_notes.toggle_pin(session, USER, note.note_id)
        assert goals_notes.toggle_pin(session, USER, note.note_id).pinned is False

    def test_writes_are_logged(self, session, caplog):
        caplog.set_level(logging.INFO, logger="kore.journal.goals_notes")
        note = goals_notes.create_note(session, USER, "x")
        goals_notes.toggle_pin(session, USER, note.note_id)
        goals_notes.delete_note(session, USER, note.note_id)

        messages = [r.getMessage() for r in caplog.records]
        assert f"Created note {note.note_id} for user {USER}" in messages
        assert f"Set note {note.note_id} pinned=True" in messages
        assert f"Deleted note {note.note_id}" in messages

    def test_other_user_cannot_touch(self, session):
        note = goals_notes.create_note(session, USER, "x")
        with pytest.raises(NotFoundError):
            goals_notes.toggle_pin(session, OTHER, note.note_id)
        with pytest.raises(NotFoundError):
            goals_notes.delete_note(session, OTHER, note.note_id)
        assert goals_notes.list_notes(session, OTHER) == []


@pytest.fixture
def default_asset(session):
    asset = AssetEntity(
        asset_id="default-eurusd",
        symbol="EURUSD",
        name="Euro / US Dollar",
        asset_type="FOREX",
        is_default=True,
    )
    repo.create_asset(session, asset)
    repo.commit(session)
    return asset


class TestAssets:
    """Default and user assets."""

    def test_list_defaults_first(self, session, default_asset):
        assets.create_asset(session, USER, "aapl", "STOCK", "  ")
        listed = assets.list_assets(session, USER)
        assert [a.symbol for a in listed] == ["EURUSD", "AAPL"]
        assert listed[1].name is None

    def test_user_assets_are_private(self, session, default_asset):
        assets.create_asset(session, USER, "AAPL", "STOCK")
        assert [a.symbol for a in assets.list_assets(session, OTHER)] == ["EURUSD"]

    def test_duplicate_rejected(self, session, default_asset):
        assets.create_asset(session, USER, "AAPL", "STOCK")
        with pytest.raises(ConflictError):
            assets.create_asset(session, USER, " aapl", "STOCK")
        with pytest.raises(ConflictError):
            assets.create_asset(session, USER, "eurusd", "FOREX")

    def test_same_symbol_for_different_users(self, session):
        assets.create_asset(session, USER, "AAPL", "STOCK")
        assert assets.create_asset(session, OTHER, "AAPL", "STOCK").symbol == "AAPL"

    def test_default_cannot_be_deleted(self, session, default_asset):
        with pytest.raises(NotFoundError):
            assets.delete_asset(session, USER, default_asset.asset_id)

    def test_delete_own(self, session):
        asset = assets.create_asset(session, USER, "AAPL", "STOCK")
        assets.delete_asset(session, USER, asset.asset_id)
        assert assets.list_assets(session, USER) == []
