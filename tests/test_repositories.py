"""Unit tests for infrastructure repositories.

Tests verify that repositories:
1. Load data correctly from files
2. Provide proper caching
3. Handle errors gracefully
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from journal_analytics.domain.models import Direction, FillAction, Outcome, Trade
from journal_analytics.infrastructure import (
    DataPaths,
    RepositoryError,
    RiskLimits,
)
from journal_analytics.infrastructure.repositories import (
    ComplianceRepository,
    FillRepository,
    RiskSettingsRepository,
    TradeRepository,
    parse_exchange_fill,
    parse_trade_csv,
    trades_to_csv,
)
from journal_analytics.infrastructure.repositories.compliance_repo import parse_followed


@pytest.fixture
def paths(tmp_path) -> DataPaths:
    p = DataPaths(root=tmp_path)
    p.ensure_dirs()
    return p


def make_trade(**overrides) -> Trade:
    values = dict(
        symbol="BTC",
        direction=Direction.LONG,
        entry_price=106.66666666666667,
        exit_price=130.0,
        quantity=15.0,
        outcome=Outcome.WIN,
        pnl=325.0,
        entry_time=datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc),
        exit_time=datetime(2024, 1, 2, 15, 0, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return Trade(**values)


# =============================================================================
# DataPaths Tests
# =============================================================================

class TestDataPaths:
    """Tests for DataPaths configuration."""

    def test_validate_returns_missing_files(self):
        """Validate should return list of missing paths."""
        fake_paths = DataPaths(root=Path("/nonexistent"))
        missing = fake_paths.validate()
        assert len(missing) == 2
        assert all(isinstance(m, str) for m in missing)

    def test_paths_are_consistent(self, tmp_path):
        """All paths should be relative to root directory."""
        paths = DataPaths(root=tmp_path)
        assert paths.trades_file == tmp_path / "data" / "trades.csv"
        assert paths.fills_file == paths.data_dir / "fills.json"
        assert paths.reports_dir == paths.data_dir / "reports"
        assert paths.risk_settings == tmp_path / "risk_settings.json"


class TestRiskLimits:
    """Tests for RiskLimits conversion."""

    def test_from_dict(self):
        limits = RiskLimits.from_dict({"daily_loss_limit": "500", "unknown": 1})
        assert limits.daily_loss_limit == 500.0
        assert limits.weekly_loss_limit is None

    def test_round_trip(self):
        limits = RiskLimits(daily_loss_limit=1.0, portfolio_value=2.0)
        assert RiskLimits.from_dict(limits.to_dict()) == limits


# =============================================================================
# FillRepository Tests
# =============================================================================

class TestParseExchangeFill:
    """Tests for exchange record conversion."""

    def test_string_numbers(self):
        fill = parse_exchange_fill({
            "coin": "BTC", "px": "65000.5", "sz": "0.01", "time": 1700000000000,
            "dir": "Close Long", "closedPnl": "12.5", "fee": "0.02",
        })
        assert fill.instrument == "BTC"
        assert fill.price == 65000.5
        assert fill.size == 0.01
        assert fill.action == FillAction.CLOSE_LONG
        assert fill.realized_pnl == 12.5
        assert fill.fee == 0.02
        assert fill.is_valid

    def test_bad_values_make_invalid_fill(self):
        fill = parse_exchange_fill({"coin": "BTC", "px": "abc", "sz": "1", "dir": "Buy"})
        assert not fill.is_valid
        assert fill.action is None
        assert fill.realized_pnl == 0.0

    def test_unparseable_time_makes_invalid_fill(self):
        fill = parse_exchange_fill({
            "coin": "BTC", "px": "100", "sz": "1", "time": "abc", "dir": "Open Long",
        })
        assert fill.timestamp == -1
        assert not fill.is_valid


class TestFillRepository:
    """Tests for FillRepository."""

    def test_load(self, paths):
        paths.fills_file.write_text(json.dumps([
            {"coin": "ETH", "px": "2000", "sz": "1", "time": 1, "dir": "Open Long"},
            {"coin": "ETH", "px": "2100", "sz": "1", "time": 2, "dir": "Close Long",
             "closedPnl": "100"},
            "not a record",
        ]))
        repo = FillRepository(paths)
        fills = repo.get_all()
        assert len(fills) == 2
        assert repo.count() == 2

    def test_caching(self, paths):
        paths.fills_file.write_text("[]")
        repo = FillRepository(paths)
        assert repo.get_all() is repo.get_all()

    def test_missing_file(self, paths):
        with pytest.raises(RepositoryError, match="not found"):
            FillRepository(paths).get_all()

    def test_not_an_array(self, paths):
        paths.fills_file.write_text('{"coin": "BTC"}')
        with pytest.raises(RepositoryError, match="JSON array"):
            FillRepository(paths).get_all()

    def test_invalid_json(self, paths):
        paths.fills_file.write_text("[{")
        with pytest.raises(RepositoryError):
            FillRepository(paths).get_all()

    def test_explicit_path(self, paths, tmp_path):
        other = tmp_path / "march.json"
        other.write_text(json.dumps([
            {"coin": "SOL", "px": "50", "sz": "2", "time": 1, "dir": "Open Short"},
        ]))
        [fill] = FillRepository(paths, path=other).get_all()
        assert fill.instrument == "SOL"
        assert not paths.fills_file.exists()


# =============================================================================
# TradeRepository Tests
# =============================================================================

class TestTradeRepository:
    """Tests for TradeRepository."""

    def test_empty_journal(self, paths):
        assert TradeRepository(paths).get_all() == []

    def test_add_assigns_ids(self, paths):
        stored = TradeRepository(paths).add([make_trade(), make_trade()])
        ids = [t.trade_id for t in stored]
        assert all(ids)
        assert len(set(ids)) == 2

    def test_round_trip(self, paths):
        original = make_trade(stop_loss_price=100.0, strategy_name="Breakout", notes="scaled in")
        open_trade = make_trade(
            symbol="ETH", direction=Direction.SHORT, exit_price=None,
            outcome=Outcome.OPEN, pnl=None, exit_time=None,
        )
        TradeRepository(paths).add([original, open_trade])

        loaded = TradeRepository(paths).get_all()
        assert len(loaded) == 2

        closed = loaded[0]
        assert closed.symbol == "BTC"
        assert closed.entry_price == pytest.approx(original.entry_price)
        assert closed.pnl == 325.0
        assert closed.outcome == Outcome.WIN
        assert closed.entry_time == original.entry_time
        assert closed.exit_time == original.exit_time
        assert closed.stop_loss_price == 100.0
        assert closed.strategy_name == "Breakout"
        assert closed.notes == "scaled in"

        still_open = loaded[1]
        assert still_open.is_open
        assert still_open.direction == Direction.SHORT
        assert still_open.pnl is None
        assert still_open.exit_time is None
        assert still_open.stop_loss_price is None

    def test_add_is_insert(self, paths):
        repo = TradeRepository(paths)
        repo.add([make_trade()])
        repo.add([make_trade()])
        assert len(TradeRepository(paths).get_all()) == 2

    def test_symbols(self, paths):
        repo = TradeRepository(paths)
        repo.add([make_trade(symbol="ETH"), make_trade(), make_trade()])
        assert repo.list_symbols() == ["BTC", "ETH"]
        assert len(repo.get_by_symbol("BTC")) == 2

    def test_get_frame(self, paths):
        repo = TradeRepository(paths)
        repo.add([make_trade()])
        df = repo.get_frame()
        assert df.height == 1
        assert df["pnl"][0] == 325.0

    def test_clear_cache(self, paths):
        repo = TradeRepository(paths)
        repo.add([make_trade()])
        paths.trades_file.unlink()
        assert len(repo.get_all()) == 1
        repo.clear_cache()
        assert repo.get_all() == []

    def test_corrupt_row(self, paths):
        TradeRepository(paths).add([make_trade()])
        text = paths.trades_file.read_text().replace(",Win,", ",Maybe,")
        paths.trades_file.write_text(text)
        with pytest.raises(RepositoryError, match="row 2"):
            TradeRepository(paths).get_all()


# =============================================================================
# CSV Import / Export Tests
# =============================================================================

class TestParseTradeCsv:
    """Tests for user CSV import."""

    def test_aliases_and_derived_fields(self):
        content = (
            "Ticker,Side,Entry,Exit,Qty,Date\n"
            "aapl,short,150,140,10,2024-02-01\n"
            "msft,long,300,,5,2024-02-02T10:00:00Z\n"
        )
        result = parse_trade_csv(content)
        assert result.errors == []

        short, still_open = result.valid
        assert short.symbol == "AAPL"
        assert short.direction == Direction.SHORT
        assert short.pnl == pytest.approx(100.0)
        assert short.outcome == Outcome.WIN
        assert short.strategy_name == "No Strategy"
        assert short.entry_time == datetime(2024, 2, 1, tzinfo=timezone.utc)

        assert still_open.outcome == Outcome.OPEN
        assert still_open.pnl is None

    def test_explicit_pnl_and_outcome(self):
        result = parse_trade_csv("symbol,pnl,outcome\nES,-25,L\n")
        [trade] = result.valid
        assert trade.pnl == -25
        assert trade.outcome == Outcome.LOSS

    def test_row_errors(self):
        content = (
            "symbol,entry_price\n"
            "BTC,100\n"
            ",100\n"
            "ETH,abc\n"
        )
        result = parse_trade_csv(content)
        assert len(result.valid) == 1
        assert [(e.row, e.message) for e in result.errors] == [
            (3, "Missing symbol"),
            (4, "Invalid data"),
        ]

    def test_missing_symbol_column(self):
        result = parse_trade_csv("price,qty\n1,2\n")
        assert result.valid == []
        assert result.errors[0].message == "Missing required column: symbol"

    def test_header_only(self):
        result = parse_trade_csv("symbol,pnl\n")
        assert result.errors[0].message == "No data rows found"

    def test_export_columns(self):
        text = trades_to_csv([make_trade(strategy_name="Breakout")])
        header = text.splitlines()[0]
        assert header == (
            "symbol,strategy,direction,entry_price,exit_price,quantity,"
            "pnl,outcome,entry_date,exit_date,notes"
        )
        reimported = parse_trade_csv(text).valid[0]
        assert reimported.pnl == 325.0
        assert reimported.strategy_name == "Breakout"


# =============================================================================
# ComplianceRepository Tests
# =============================================================================

class TestComplianceRepository:
    """Tests for ComplianceRepository."""

    def test_missing_file_is_empty(self, paths):
        assert ComplianceRepository(paths).get_all() == []

    def test_load(self, paths):
        paths.compliance_file.write_text(
            "trade_id,rule_id,rule_text,followed\n"
            "t1,r1,Wait for close,yes\n"
            "t1,,Size by stop,FALSE\n"
            "t2,r1,Wait for close,1\n"
        )
        repo = ComplianceRepository(paths)
        obs = repo.get_all()
        assert [o.followed for o in obs] == [True, False, True]
        assert obs[1].rule_id is None
        assert len(repo.get_by_trade("t1")) == 2

    def test_missing_columns(self, paths):
        paths.compliance_file.write_text("trade_id,rule\nt1,x\n")
        with pytest.raises(RepositoryError, match="followed"):
            ComplianceRepository(paths).get_all()

    def test_invalid_flag(self, paths):
        paths.compliance_file.write_text("trade_id,followed\nt1,maybe\n")
        with pytest.raises(RepositoryError, match="row 2"):
            ComplianceRepository(paths).get_all()

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("Y", True), ("0", False), (" no ", False),
    ])
    def test_parse_followed(self, value, expected):
        assert parse_followed(value) is expected


# =============================================================================
# RiskSettingsRepository Tests
# =============================================================================

class TestRiskSettingsRepository:
    """Tests for RiskSettingsRepository."""

    def test_defaults_without_file(self, paths):
        limits = RiskSettingsRepository(paths).get_all()
        assert limits == RiskLimits()

    def test_save_and_load(self, paths):
        limits = RiskLimits(daily_loss_limit=500, portfolio_value=25_000)
        RiskSettingsRepository(paths).save(limits)
        assert RiskSettingsRepository(paths).get_all() == limits

    def test_invalid_settings(self, paths):
        paths.risk_settings.write_text('{"daily_loss_limit": "lots"}')
        with pytest.raises(RepositoryError, match="Invalid"):
            RiskSettingsRepository(paths).get_all()
