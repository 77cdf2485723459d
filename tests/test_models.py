"""Tests for pydantic models.

Tests validate:
1. Model creation with valid data
2. Model validation rejects invalid data
3. Literal type constraints enforced
4. Unbounded ratios serialize as null
"""

import math

import pytest
from pydantic import ValidationError

from kore.models.types import (
    AssetCreate,
    GoalCreate,
    TradeClose,
    TradeCreate,
    TradeUpdate,
    finite_or_none,
)

VALID_TRADE = {
    "portfolio_id": "p-1",
    "symbol": " eurusd ",
    "direction": "SHORT",
    "entry_price": 1.085,
    "quantity": 10000,
    "entry_date": "2024-01-02T08:00:00",
}


class TestTradeCreate:
    """Test TradeCreate model."""

    def test_valid_trade(self):
        """Valid input should create model with defaults."""
        trade = TradeCreate(**VALID_TRADE)
        assert trade.symbol == "EURUSD"
        assert trade.mode == "LIVE"
        assert trade.status == "OPEN"
        assert trade.tags == []

    def test_invalid_direction(self):
        with pytest.raises(ValidationError):
            TradeCreate(**{**VALID_TRADE, "direction": "SIDEWAYS"})

    def test_scores_bounded(self):
        """Psychology scores must be 1-10."""
        with pytest.raises(ValidationError):
            TradeCreate(**VALID_TRADE, tilt_score=11)
        with pytest.raises(ValidationError):
            TradeCreate(**VALID_TRADE, stress_level=0)
        assert TradeCreate(**VALID_TRADE, confidence_level=10).confidence_level == 10

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            TradeCreate(**{**VALID_TRADE, "quantity": -1})


class TestPartialModels:
    """Update and close payloads."""

    def test_update_tracks_sent_fields(self):
        update = TradeUpdate(stop_loss=None, tags=["a"])
        assert update.model_dump(exclude_unset=True) == {"stop_loss": None, "tags": ["a"]}

    def test_close_requires_positive_exit(self):
        with pytest.raises(ValidationError):
            TradeClose(exit_price=0)
        assert TradeClose(exit_price=1.5).fees == 0.0

    def test_negative_fees_rejected(self):
        with pytest.raises(ValidationError):
            TradeClose(exit_price=1.5, fees=-1)

    def test_goal_all_optional(self):
        assert GoalCreate().model_dump() == {
            "title": None,
            "target_value": None,
            "current_value": None,
            "goal_type": None,
            "is_completed": None,
        }

    def test_asset_type_literal(self):
        with pytest.raises(ValidationError):
            AssetCreate(symbol="X", asset_type="BOND")


class TestFiniteOrNone:
    def test_values(self):
        assert finite_or_none(1.5) == 1.5
        assert finite_or_none(0.0) == 0.0
        assert finite_or_none(math.inf) is None
