"""Trade Repository: Access to the trade journal.

Provides read/append access to data/trades.csv, plus import/export of
user CSV files.

Stored columns:
    trade_id, symbol, strategy, direction, entry_price, exit_price,
    stop_loss_price, quantity, pnl, outcome, entry_date, exit_date, notes

Dates are ISO-8601 with offset. Naive dates are read as UTC.
"""

import io
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

import polars as pl

from journal_analytics.domain.models import (
    Direction,
    Outcome,
    Trade,
    calculate_pnl,
    determine_outcome,
)
from journal_analytics.infrastructure.repositories.base import (
    Repository,
    RepositoryError,
    normalize_frame,
    read_string_csv,
)
from journal_analytics.infrastructure.config import DataPaths, DEFAULT_PATHS

EXPORT_COLUMNS = [
    "symbol", "strategy", "direction", "entry_price", "exit_price",
    "quantity", "pnl", "outcome", "entry_date", "exit_date", "notes",
]

# Accepted header spellings for user CSV imports
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "symbol": ("symbol", "sym", "ticker"),
    "strategy": ("strategy", "strat", "strategy_name"),
    "direction": ("direction", "dir", "side"),
    "entry_price": ("entry_price", "entry", "buy_price"),
    "exit_price": ("exit_price", "exit", "sell_price"),
    "stop_loss_price": ("stop_loss_price", "stop_loss", "stop"),
    "quantity": ("quantity", "qty", "size", "shares"),
    "pnl": ("pnl", "p&l", "profit", "profit_loss"),
    "outcome": ("outcome", "result", "status"),
    "entry_date": ("entry_date", "date", "open_date"),
    "exit_date": ("exit_date", "close_date"),
    "notes": ("notes", "note", "comment", "comments"),
}


# =============================================================================
# Value Parsing
# =============================================================================

def parse_datetime(value: str) -> datetime:
    """Parse an ISO date/datetime, treating naive values as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_direction(value: str | None) -> Direction:
    """Map a side label to a Direction (anything unrecognized is Long)."""
    if value and value.strip().lower() in ("short", "sht", "sell", "s"):
        return Direction.SHORT
    return Direction.LONG


def parse_outcome(value: str) -> Outcome:
    lower = value.strip().lower()
    if lower in ("win", "w"):
        return Outcome.WIN
    if lower in ("loss", "l"):
        return Outcome.LOSS
    if lower in ("breakeven", "be"):
        return Outcome.BREAKEVEN
    return Outcome.OPEN


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


def _text(row: dict, column: str) -> str:
    value = row.get(column)
    return value.strip() if value else ""


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def trade_to_row(trade: Trade) -> dict:
    """Flatten a Trade to a stored CSV row."""
    return {
        "trade_id": trade.trade_id,
        "symbol": trade.symbol,
        "strategy": trade.strategy_name,
        "direction": trade.direction.value,
        "entry_price": trade.entry_price,
        "exit_price": trade.exit_price,
        "stop_loss_price": trade.stop_loss_price,
        "quantity": trade.quantity,
        "pnl": trade.pnl,
        "outcome": trade.outcome.value,
        "entry_date": _format_datetime(trade.entry_time),
        "exit_date": _format_datetime(trade.exit_time),
        "notes": trade.notes,
    }


def trades_to_frame(trades: list[Trade]) -> pl.DataFrame:
    schema = {
        "trade_id": pl.Utf8,
        "symbol": pl.Utf8,
        "strategy": pl.Utf8,
        "direction": pl.Utf8,
        "entry_price": pl.Float64,
        "exit_price": pl.Float64,
        "stop_loss_price": pl.Float64,
        "quantity": pl.Float64,
        "pnl": pl.Float64,
        "outcome": pl.Utf8,
        "entry_date": pl.Utf8,
        "exit_date": pl.Utf8,
        "notes": pl.Utf8,
    }
    return pl.DataFrame([trade_to_row(t) for t in trades], schema=schema)


def row_to_trade(row: dict) -> Trade:
    """Rebuild a Trade from a stored CSV row (all values as text).

    Raises:
        ValueError: If a value does not parse or fails validation
    """
    exit_date = _text(row, "exit_date")
    return Trade(
        symbol=_text(row, "symbol"),
        direction=Direction(_text(row, "direction")),
        entry_price=float(_text(row, "entry_price")),
        exit_price=_optional_float(row.get("exit_price")),
        quantity=float(_text(row, "quantity")),
        outcome=Outcome(_text(row, "outcome")),
        pnl=_optional_float(row.get("pnl")),
        entry_time=parse_datetime(_text(row, "entry_date")),
        exit_time=parse_datetime(exit_date) if exit_date else None,
        trade_id=_text(row, "trade_id"),
        stop_loss_price=_optional_float(row.get("stop_loss_price")),
        strategy_name=_text(row, "strategy"),
        notes=_text(row, "notes"),
    )


# =============================================================================
# User CSV Import / Export
# =============================================================================

@dataclass(frozen=True, slots=True)
class CsvRowError:
    """A rejected row in a user CSV import (row 1 is the header)."""
    row: int
    message: str


@dataclass(frozen=True, slots=True)
class CsvParseResult:
    """Outcome of a user CSV import."""
    valid: list[Trade] = field(default_factory=list)
    errors: list[CsvRowError] = field(default_factory=list)


def _resolve_columns(columns: list[str]) -> dict[str, str]:
    """Map canonical field name -> header actually present."""
    resolved = {}
    for canonical, names in COLUMN_ALIASES.items():
        for name in names:
            if name in columns:
                resolved[canonical] = name
                break
    return resolved


def _import_row(row: dict, colmap: dict[str, str]) -> Trade:
    def col(name: str) -> str:
        return _text(row, colmap[name]) if name in colmap else ""

    direction = parse_direction(col("direction"))
    entry_price = float(col("entry_price") or "0")
    exit_price = _optional_float(col("exit_price"))
    quantity = float(col("quantity") or "1")

    pnl_text = col("pnl")
    if pnl_text:
        pnl = float(pnl_text)
    elif exit_price is not None:
        pnl = calculate_pnl(direction, entry_price, exit_price, quantity)
    else:
        pnl = None

    outcome_text = col("outcome")
    if outcome_text:
        outcome = parse_outcome(outcome_text)
    elif pnl is not None:
        outcome = determine_outcome(pnl)
    else:
        outcome = Outcome.OPEN

    entry_text = col("entry_date")
    exit_text = col("exit_date")

    return Trade(
        symbol=col("symbol").upper(),
        direction=direction,
        entry_price=entry_price,
        exit_price=exit_price,
        quantity=quantity,
        outcome=outcome,
        pnl=pnl,
        entry_time=parse_datetime(entry_text) if entry_text else datetime.now(timezone.utc),
        exit_time=parse_datetime(exit_text) if exit_text else None,
        stop_loss_price=_optional_float(col("stop_loss_price")),
        strategy_name=col("strategy") or "No Strategy",
        notes=col("notes"),
    )


def parse_trade_csv(content: str) -> CsvParseResult:
    """Parse a user-supplied trade CSV.

    Header names are matched case-insensitively against COLUMN_ALIASES.
    Missing PNL is derived from prices; missing outcome from the PNL sign.
    Bad rows are reported, never raised.

    Example:
        >>> result = parse_trade_csv("symbol,pnl\\nAAPL,50\\n")
        >>> result.valid[0].outcome
        <Outcome.WIN: 'Win'>
    """
    try:
        df = pl.read_csv(io.BytesIO(content.encode("utf-8")), infer_schema_length=0)
    except Exception as e:
        return CsvParseResult(errors=[CsvRowError(0, f"Unreadable CSV: {e}")])

    df = normalize_frame(df)
    if len(df) == 0:
        return CsvParseResult(errors=[CsvRowError(0, "No data rows found")])

    colmap = _resolve_columns(df.columns)
    if "symbol" not in colmap:
        return CsvParseResult(errors=[CsvRowError(0, "Missing required column: symbol")])

    valid: list[Trade] = []
    errors: list[CsvRowError] = []

    for i, row in enumerate(df.iter_rows(named=True), start=2):
        if not _text(row, colmap["symbol"]):
            errors.append(CsvRowError(i, "Missing symbol"))
            continue
        try:
            valid.append(_import_row(row, colmap))
        except ValueError:
            errors.append(CsvRowError(i, "Invalid data"))

    return CsvParseResult(valid=valid, errors=errors)


def trades_to_csv(trades: list[Trade]) -> str:
    """Export trades in the user-facing CSV layout."""
    return trades_to_frame(trades).select(EXPORT_COLUMNS).write_csv()


# =============================================================================
# Repository
# =============================================================================

class TradeRepository(Repository[list[Trade]]):
    """Repository for the trade journal.

    Appends never deduplicate against stored trades; each add() is an
    insert. Trades without an id get a fresh one on insert.

    Example:
        >>> repo = TradeRepository()
        >>> trades = repo.get_all()
        >>> stored = repo.add(new_trades)
    """

    def __init__(self, paths: DataPaths = DEFAULT_PATHS):
        self._paths = paths
        self._cache: list[Trade] | None = None

    def get_all(self) -> list[Trade]:
        """Load all stored trades.

        Returns:
            Trades in stored order (empty if the journal does not exist)

        Raises:
            RepositoryError: If the file cannot be read or a row is corrupt
        """
        if self._cache is not None:
            return self._cache

        path = self._paths.trades_file
        if not path.exists():
            return []

        df = read_string_csv(path, "Trade journal")

        trades = []
        for i, row in enumerate(df.iter_rows(named=True), start=2):
            try:
                trades.append(row_to_trade(row))
            except ValueError as e:
                raise RepositoryError(f"Corrupt trade at row {i}: {e}", str(path))

        self._cache = trades
        return self._cache

    def get_frame(self) -> pl.DataFrame:
        """Stored trades as a typed DataFrame."""
        return trades_to_frame(self.get_all())

    def add(self, trades: list[Trade]) -> list[Trade]:
        """Insert trades, assigning ids to those without one.

        Returns:
            The trades as stored (with ids)
        """
        stored = [
            t if t.trade_id else replace(t, trade_id=uuid.uuid4().hex)
            for t in trades
        ]

        existing = self.get_all()
        self._paths.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._paths.trades_file
        try:
            trades_to_frame(existing + stored).write_csv(path)
        except OSError as e:
            raise RepositoryError(f"Failed to write trades: {e}", str(path))

        self._cache = existing + stored
        return stored

    def get_by_symbol(self, symbol: str) -> list[Trade]:
        return [t for t in self.get_all() if t.symbol == symbol]

    def list_symbols(self) -> list[str]:
        """Get sorted list of all traded symbols."""
        return sorted({t.symbol for t in self.get_all()})

    def clear_cache(self) -> None:
        """Clear cached data."""
        self._cache = None