"""Domain Models: Core data structures for trade journal analytics.

These models represent the fundamental business entities:
- FillEvent: A single exchange execution (input to trade reconstruction)
- PositionAccumulator: Running weighted-average view of an open position
- Trade: A round-trip trade segment (closed) or a still-open position
- ComplianceObservation: Whether a strategy rule was followed on a trade

Design Principles:
- Immutable where possible (frozen dataclass)
- Validation in __post_init__ (except FillEvent, see below)
- Computed properties for derived values
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class Direction(str, Enum):
    """Side of a position."""

    LONG = "Long"
    SHORT = "Short"


class Outcome(str, Enum):
    """Result classification of a trade."""

    WIN = "Win"
    LOSS = "Loss"
    BREAKEVEN = "Breakeven"
    OPEN = "Open"


class FillAction(str, Enum):
    """Whether a fill opens or closes exposure, and on which side."""

    OPEN_LONG = "Open Long"
    OPEN_SHORT = "Open Short"
    CLOSE_LONG = "Close Long"
    CLOSE_SHORT = "Close Short"

    @property
    def is_open(self) -> bool:
        return self in (FillAction.OPEN_LONG, FillAction.OPEN_SHORT)

    @property
    def is_close(self) -> bool:
        return self in (FillAction.CLOSE_LONG, FillAction.CLOSE_SHORT)

    @property
    def direction(self) -> Direction:
        """Position side this action opens or closes."""
        if self in (FillAction.OPEN_LONG, FillAction.CLOSE_LONG):
            return Direction.LONG
        return Direction.SHORT

    @classmethod
    def parse(cls, value: str | None) -> FillAction | None:
        """Map an exchange direction label to an action, None if unknown."""
        if value is None:
            return None
        try:
            return cls(value.strip())
        except ValueError:
            return None


# =============================================================================
# Helpers
# =============================================================================

def _validate_positive(value: int | float, field_name: str) -> None:
    """Validate that value is positive."""
    if value <= 0:
        raise ValueError(f"{field_name} must be positive, got: {value}")


def _validate_non_negative(value: int | float, field_name: str) -> None:
    """Validate that value is non-negative."""
    if value < 0:
        raise ValueError(f"{field_name} must be non-negative, got: {value}")


def _validate_aware(value: datetime | None, field_name: str) -> None:
    """Validate that a datetime carries a timezone."""
    if value is not None and value.tzinfo is None:
        raise ValueError(f"{field_name} must be timezone-aware, got: {value}")


# Last second of year 9999, the largest datetime can represent
MAX_TIMESTAMP_MS = 253_402_300_799_000


def timestamp_to_datetime(timestamp_ms: int) -> datetime:
    """Convert an epoch timestamp in milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def determine_outcome(pnl: float) -> Outcome:
    """Classify a realized PNL value."""
    if pnl > 0:
        return Outcome.WIN
    if pnl < 0:
        return Outcome.LOSS
    return Outcome.BREAKEVEN


def calculate_pnl(
    direction: Direction,
    entry_price: float,
    exit_price: float,
    quantity: float,
) -> float:
    """Gross PNL of a round trip.

    For long trades: (exit - entry) * quantity
    For short trades: (entry - exit) * quantity
    """
    if direction == Direction.LONG:
        return (exit_price - entry_price) * quantity
    return (entry_price - exit_price) * quantity


# =============================================================================
# Fills
# =============================================================================

@dataclass(frozen=True, slots=True)
class FillEvent:
    """One executed unit of an order on an exchange.

    Not validated on construction: exchange data is outside our control and
    the aggregator skips malformed fills instead of failing the batch.

    Attributes:
        instrument: Exchange symbol (e.g., "BTC")
        price: Execution price
        size: Executed size (always positive, side comes from action)
        timestamp: Epoch milliseconds
        action: Open/close side, None when the exchange label is unknown
        realized_pnl: Exchange-reported PNL for the closing portion
        fee: Exchange fee, carried but never subtracted from PNL
    """

    instrument: str
    price: float
    size: float
    timestamp: int
    action: FillAction | None
    realized_pnl: float = 0.0
    fee: float = 0.0

    @property
    def is_valid(self) -> bool:
        """Whether the aggregator can use this fill."""
        return (
            bool(self.instrument)
            and self.action is not None
            and self.price > 0
            and self.size > 0
            and 0 <= self.timestamp <= MAX_TIMESTAMP_MS
        )


@dataclass(slots=True)
class PositionAccumulator:
    """Weighted-average cost view of a live position in one instrument.

    Invariant: weighted_cost_sum / total_size is the volume-weighted average
    entry price of all opens folded into this position.
    """

    direction: Direction
    total_size: float
    weighted_cost_sum: float
    first_entry_timestamp: int

    @property
    def average_price(self) -> float:
        return self.weighted_cost_sum / self.total_size

    def add(self, price: float, size: float) -> None:
        self.weighted_cost_sum += price * size
        self.total_size += size

    def reduce(self, size: float) -> None:
        """Take size off the position at the current average price."""
        self.weighted_cost_sum -= self.average_price * size
        self.total_size -= size


# =============================================================================
# Trades
# =============================================================================

@dataclass(frozen=True, slots=True)
class Trade:
    """A round-trip trade segment, or a still-open position.

    Attributes:
        symbol: Instrument symbol
        direction: Long or Short
        entry_price: Volume-weighted average entry price
        exit_price: Exit price (None while open)
        quantity: Size of this segment (must be positive)
        outcome: Win/Loss/Breakeven, or Open
        pnl: Gross realized PNL (None while open)
        entry_time: First entry time (timezone-aware)
        exit_time: Exit time (None while open)
        trade_id: Identifier assigned by the store (empty until persisted)
        stop_loss_price: Planned stop, if the trader set one
        strategy_name: Strategy label
        notes: Free-form notes

    Example:
        >>> trade = Trade(
        ...     symbol="BTC", direction=Direction.LONG, entry_price=100.0,
        ...     exit_price=110.0, quantity=2.0, outcome=Outcome.WIN, pnl=20.0,
        ...     entry_time=timestamp_to_datetime(0),
        ...     exit_time=timestamp_to_datetime(60_000),
        ... )
        >>> trade.is_closed
        True
    """

    symbol: str
    direction: Direction
    entry_price: float
    exit_price: float | None
    quantity: float
    outcome: Outcome
    pnl: float | None
    entry_time: datetime
    exit_time: datetime | None = None
    trade_id: str = ""
    stop_loss_price: float | None = None
    strategy_name: str = ""
    notes: str = ""

    def __post_init__(self) -> None:
        """Validate all fields after initialization."""
        if not self.symbol:
            raise ValueError("symbol cannot be empty")
        if not isinstance(self.direction, Direction):
            raise ValueError(f"direction must be a Direction, got: {self.direction!r}")
        if not isinstance(self.outcome, Outcome):
            raise ValueError(f"outcome must be an Outcome, got: {self.outcome!r}")
        _validate_positive(self.quantity, "quantity")
        _validate_non_negative(self.entry_price, "entry_price")
        _validate_aware(self.entry_time, "entry_time")
        _validate_aware(self.exit_time, "exit_time")
        if self.exit_price is not None:
            _validate_non_negative(self.exit_price, "exit_price")
        if self.stop_loss_price is not None:
            _validate_non_negative(self.stop_loss_price, "stop_loss_price")

    @property
    def is_open(self) -> bool:
        return self.outcome == Outcome.OPEN

    @property
    def is_closed(self) -> bool:
        return self.outcome != Outcome.OPEN

    @property
    def closed_at(self) -> datetime:
        """Exit time, or entry time for trades recorded without one."""
        return self.exit_time or self.entry_time

    @property
    def planned_risk(self) -> float | None:
        """Loss if the stop is hit: |entry - stop| * quantity."""
        if self.stop_loss_price is None:
            return None
        return abs(self.entry_price - self.stop_loss_price) * self.quantity


@dataclass(frozen=True, slots=True)
class ComplianceObservation:
    """Whether one strategy rule was followed on one trade."""

    trade_id: str
    rule_text: str
    followed: bool
    rule_id: str | None = None

    def __post_init__(self) -> None:
        if not self.trade_id:
            raise ValueError("trade_id cannot be empty")

    @property
    def rule_key(self) -> str:
        """Grouping key: rule id when known, else rule text."""
        return self.rule_id or self.rule_text
