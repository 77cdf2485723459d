#!/usr/bin/env python3
"""Seed a demo journal.

Creates shared default assets and a demo user with one portfolio, two
strategies, a handful of closed trades, an open trade, a goal and a note.
Useful for exercising the dashboard without typing trades by hand.

Usage:
    python scripts/seed_demo.py
    curl -H "X-User-Id: demo" http://127.0.0.1:8000/api/dashboard

This script:
1. Initializes the demo database
2. Seeds default assets (skipped if present)
3. Seeds the demo user's journal (skipped if present)
"""

from __future__ import annotations

import sys
import uuid
from datetime import datetime, timedelta
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from kore.db import repo  # noqa: E402
from kore.db.session import get_db_session, init_db  # noqa: E402
from kore.journal import goals_notes, portfolios, trades  # noqa: E402
from kore.models.domain import AssetEntity  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "data" / "kore.db"
DEMO_USER_ID = "demo"

DEFAULT_ASSETS = [
    ("EURUSD", "Euro / US Dollar", "FOREX"),
    ("GBPUSD", "British Pound / US Dollar", "FOREX"),
    ("BTCUSD", "Bitcoin", "CRYPTO"),
    ("AAPL", "Apple Inc.", "STOCK"),
    ("SPY", "SPDR S&P 500 ETF", "ETF"),
    ("XAUUSD", "Gold", "COMMODITY"),
]

# (symbol, direction, entry, exit, stop, quantity, strategy, emotions)
DEMO_TRADES = [
    ("AAPL", "LONG", 180.0, 185.0, 178.0, 20, "breakout", ["confident"]),
    ("SPY", "LONG", 440.0, 436.0, 437.0, 10, "breakout", ["fomo"]),
    ("BTCUSD", "SHORT", 42000.0, 41200.0, 42400.0, 0.1, "reversal", ["calm"]),
    ("AAPL", "LONG", 186.0, 186.0, 184.0, 20, "breakout", ["calm"]),
    ("EURUSD", "LONG", 1.0850, 1.0910, 1.0820, 10000, "reversal", ["confident"]),
]


def seed_default_assets() -> None:
    """Insert shared default assets that do not exist yet."""
    with get_db_session(DEMO_DB_PATH) as session:
        visible = {a.symbol for a in repo.get_assets_for_user(session, DEMO_USER_ID)}
        created = 0
        for symbol, name, asset_type in DEFAULT_ASSETS:
            if symbol in visible:
                continue
            repo.create_asset(
                session,
                AssetEntity(
                    asset_id=str(uuid.uuid4()),
                    symbol=symbol,
                    name=name,
                    asset_type=asset_type,
                    is_default=True,
                ),
            )
            created += 1
        print(f"Default assets created: {created}")


def seed_journal() -> None:
    """Create the demo user's portfolio, strategies and trades."""
    with get_db_session(DEMO_DB_PATH) as session:
        if repo.count_portfolios_for_user(session, DEMO_USER_ID) > 0:
            print(f"Demo journal already exists for user: {DEMO_USER_ID}")
            return

        print("Creating portfolio...")
        portfolio = portfolios.create_portfolio(
            session, DEMO_USER_ID, "Demo account", "DEMO", initial_balance=10000.0
        )

        print("Creating strategies...")
        strategy_ids = {
            key: portfolios.create_strategy(session, DEMO_USER_ID, name).strategy_id
            for key, name in (("breakout", "Breakout"), ("reversal", "Mean reversion"))
        }

        print("Creating trades...")
        start = datetime(2024, 1, 8, 14, 30)
        for day, (symbol, direction, entry, exit_, stop, qty, strategy, emotions) in enumerate(
            DEMO_TRADES
        ):
            entry_date = start + timedelta(days=day)
            trade = trades.create_trade(
                session,
                DEMO_USER_ID,
                trades.TradeInput(
                    portfolio_id=portfolio.portfolio_id,
                    strategy_id=strategy_ids[strategy],
                    symbol=symbol,
                    direction=direction,
                    entry_price=entry,
                    quantity=qty,
                    stop_loss=stop,
                    entry_date=entry_date,
                    emotion_tags=emotions,
                ),
            )
            closed = trades.close_trade(
                session,
                DEMO_USER_ID,
                trade.trade_id,
                exit_price=exit_,
                exit_date=entry_date + timedelta(hours=3),
                fees=1.0,
            )
            print(f"  {symbol} {direction}: net_pnl={closed.net_pnl:.2f}")

        trades.create_trade(
            session,
            DEMO_USER_ID,
            trades.TradeInput(
                portfolio_id=portfolio.portfolio_id,
                symbol="XAUUSD",
                direction="LONG",
                entry_price=2030.0,
                quantity=1,
                stop_loss=2015.0,
                entry_date=start + timedelta(days=len(DEMO_TRADES)),
            ),
        )

        goals_notes.create_goal(
            session, DEMO_USER_ID, title="Reach 60% win rate", target_value=60, goal_type="winrate"
        )
        goals_notes.refresh_goal_progress(session, DEMO_USER_ID)
        goals_notes.create_note(
            session, DEMO_USER_ID, "Wait for the retest before entering breakouts.", "lesson"
        )

        print("Journal seeded successfully!")


def main() -> int:
    """Main entry point."""
    print("=" * 60)
    print("Kore Demo Seeding Script")
    print("=" * 60)

    print("\n[1/3] Initializing database...")
    init_db(DEMO_DB_PATH)

    print("\n[2/3] Seeding default assets...")
    seed_default_assets()

    print("\n[3/3] Seeding demo journal...")
    seed_journal()

    print("\n" + "=" * 60)
    print("Demo seeding complete!")
    print(f"Database: {DEMO_DB_PATH}")
    print(f"User: {DEMO_USER_ID}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
