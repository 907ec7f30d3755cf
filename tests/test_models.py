"""Unit tests for domain/models.py.

Tests verify:
1. Model creation and validation
2. Computed properties
3. Outcome and PNL helpers
"""

import pytest
from datetime import datetime, timezone

from journal_analytics.domain.models import (
    ComplianceObservation,
    Direction,
    FillAction,
    FillEvent,
    Outcome,
    PositionAccumulator,
    Trade,
    calculate_pnl,
    determine_outcome,
    timestamp_to_datetime,
)


def make_trade(**overrides) -> Trade:
    values = dict(
        symbol="BTC",
        direction=Direction.LONG,
        entry_price=100.0,
        exit_price=110.0,
        quantity=2.0,
        outcome=Outcome.WIN,
        pnl=20.0,
        entry_time=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return Trade(**values)


# =============================================================================
# Helper Tests
# =============================================================================

class TestHelpers:
    """Tests for module-level helpers."""

    def test_timestamp_to_datetime_is_utc(self):
        dt = timestamp_to_datetime(1_700_000_000_000)
        assert dt.tzinfo == timezone.utc
        assert dt == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_timestamp_keeps_milliseconds(self):
        assert timestamp_to_datetime(1_500).microsecond == 500_000

    @pytest.mark.parametrize("pnl,expected", [
        (0.01, Outcome.WIN),
        (-0.01, Outcome.LOSS),
        (0.0, Outcome.BREAKEVEN),
    ])
    def test_determine_outcome(self, pnl, expected):
        assert determine_outcome(pnl) == expected

    def test_calculate_pnl_long(self):
        assert calculate_pnl(Direction.LONG, 100, 110, 3) == 30

    def test_calculate_pnl_short(self):
        """Shorts profit when price falls."""
        assert calculate_pnl(Direction.SHORT, 100, 90, 3) == 30
        assert calculate_pnl(Direction.SHORT, 100, 110, 3) == -30


# =============================================================================
# FillAction / FillEvent Tests
# =============================================================================

class TestFillAction:
    """Tests for FillAction parsing and classification."""

    def test_parse_exchange_labels(self):
        assert FillAction.parse("Open Long") == FillAction.OPEN_LONG
        assert FillAction.parse(" Close Short ") == FillAction.CLOSE_SHORT

    def test_parse_unknown_is_none(self):
        assert FillAction.parse("Buy") is None
        assert FillAction.parse(None) is None

    def test_classification(self):
        assert FillAction.OPEN_SHORT.is_open
        assert not FillAction.OPEN_SHORT.is_close
        assert FillAction.CLOSE_LONG.is_close
        assert FillAction.CLOSE_LONG.direction == Direction.LONG
        assert FillAction.OPEN_SHORT.direction == Direction.SHORT


class TestFillEvent:
    """Tests for FillEvent validity."""

    def test_valid_fill(self):
        fill = FillEvent("ETH", 2000.0, 1.0, 1, FillAction.OPEN_LONG)
        assert fill.is_valid

    @pytest.mark.parametrize("kwargs", [
        {"price": 0.0},
        {"size": 0.0},
        {"size": -1.0},
        {"action": None},
        {"instrument": ""},
        {"timestamp": -1},
        {"timestamp": 10**17},
    ])
    def test_invalid_fill(self, kwargs):
        values = dict(
            instrument="ETH", price=2000.0, size=1.0, timestamp=1,
            action=FillAction.OPEN_LONG,
        )
        values.update(kwargs)
        assert not FillEvent(**values).is_valid

    def test_nan_price_is_invalid(self):
        fill = FillEvent("ETH", float("nan"), 1.0, 1, FillAction.OPEN_LONG)
        assert not fill.is_valid


class TestPositionAccumulator:
    """Tests for weighted-average accounting."""

    def test_add_updates_average(self):
        acc = PositionAccumulator(Direction.LONG, 10.0, 1000.0, 1)
        acc.add(120.0, 10.0)
        assert acc.total_size == 20.0
        assert acc.average_price == pytest.approx(110.0)

    def test_reduce_keeps_average(self):
        acc = PositionAccumulator(Direction.LONG, 20.0, 2200.0, 1)
        acc.reduce(5.0)
        assert acc.total_size == 15.0
        assert acc.average_price == pytest.approx(110.0)


# =============================================================================
# Trade Tests
# =============================================================================

class TestTrade:
    """Tests for Trade dataclass."""

    def test_create_valid(self):
        trade = make_trade()
        assert trade.is_closed
        assert not trade.is_open

    def test_open_trade(self):
        trade = make_trade(exit_price=None, outcome=Outcome.OPEN, pnl=None)
        assert trade.is_open
        assert trade.closed_at == trade.entry_time

    def test_closed_at_prefers_exit_time(self):
        exit_time = datetime(2024, 1, 3, tzinfo=timezone.utc)
        assert make_trade(exit_time=exit_time).closed_at == exit_time

    def test_empty_symbol_raises(self):
        with pytest.raises(ValueError, match="symbol"):
            make_trade(symbol="")

    def test_non_positive_quantity_raises(self):
        with pytest.raises(ValueError, match="quantity"):
            make_trade(quantity=0)

    def test_negative_price_raises(self):
        with pytest.raises(ValueError, match="entry_price"):
            make_trade(entry_price=-1.0)

    def test_direction_must_be_enum(self):
        with pytest.raises(ValueError, match="direction"):
            make_trade(direction="Up")

    def test_naive_entry_time_raises(self):
        with pytest.raises(ValueError, match="entry_time"):
            make_trade(entry_time=datetime(2024, 1, 2))

    def test_naive_exit_time_raises(self):
        with pytest.raises(ValueError, match="exit_time"):
            make_trade(exit_time=datetime(2024, 1, 3))

    def test_planned_risk(self):
        assert make_trade(stop_loss_price=95.0).planned_risk == pytest.approx(10.0)
        assert make_trade().planned_risk is None

    def test_short_planned_risk_uses_distance(self):
        trade = make_trade(direction=Direction.SHORT, stop_loss_price=104.0)
        assert trade.planned_risk == pytest.approx(8.0)

    def test_immutable(self):
        trade = make_trade()
        with pytest.raises(AttributeError):
            trade.pnl = 0.0


class TestComplianceObservation:
    """Tests for ComplianceObservation."""

    def test_rule_key_prefers_id(self):
        obs = ComplianceObservation("t1", "Wait for close", True, rule_id="r1")
        assert obs.rule_key == "r1"

    def test_rule_key_falls_back_to_text(self):
        obs = ComplianceObservation("t1", "Wait for close", False)
        assert obs.rule_key == "Wait for close"

    def test_trade_id_required(self):
        with pytest.raises(ValueError):
            ComplianceObservation("", "Rule", True)
