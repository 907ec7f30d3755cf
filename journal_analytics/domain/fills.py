"""Trade Reconstruction: Exchange fills -> round-trip trades.

Rebuilds the trader's position history from a flat stream of fills using
weighted-average cost accounting:

- Opens on a flat instrument start a new position
- Further opens on the same side fold into the weighted average
- Each close emits its own Trade at the current average entry price,
  carrying the exchange-reported realized PNL for that fill
- Anything still open at the end becomes one synthetic "Open" trade

PNL is gross: fees travel on FillEvent but are never subtracted.

Only one position per instrument can be live. An open on the opposite side
of a live position is ignored and counted (see ReconstructionStats), rather
than folded into the average.
"""

from dataclasses import dataclass, field
from typing import Sequence

from journal_analytics.domain.models import (
    Direction,
    FillEvent,
    Outcome,
    PositionAccumulator,
    Trade,
    determine_outcome,
    timestamp_to_datetime,
)

MAX_FILLS = 10_000
SIZE_EPSILON = 1e-6


class FillLimitExceeded(ValueError):
    """Raised before reconstruction when the fill batch is over the cap."""

    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(f"{count} fills exceeds the limit of {limit}")


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(slots=True)
class ReconstructionStats:
    """Counters describing one reconstruction pass.

    Attributes:
        fill_count: Number of fills received
        instrument_count: Distinct instruments seen
        skipped_fills: Malformed fills (bad price/size, unknown action)
        conflicting_opens: Opens against a live opposite-side position
        untracked_closes: Closes with no live position (own price used)
        overclosed_fills: Closes larger than the live position
    """
    fill_count: int = 0
    instrument_count: int = 0
    skipped_fills: int = 0
    conflicting_opens: int = 0
    untracked_closes: int = 0
    overclosed_fills: int = 0


@dataclass(frozen=True, slots=True)
class ReconstructionResult:
    """Trades rebuilt from a fill stream plus pass statistics."""
    trades: tuple[Trade, ...]
    stats: ReconstructionStats = field(default_factory=ReconstructionStats)

    @property
    def closed_trades(self) -> list[Trade]:
        return [t for t in self.trades if t.is_closed]

    @property
    def open_trades(self) -> list[Trade]:
        return [t for t in self.trades if t.is_open]


# =============================================================================
# Core Reconstruction
# =============================================================================

def reconstruct_trades(
    fills: Sequence[FillEvent],
    *,
    max_fills: int = MAX_FILLS,
    epsilon: float = SIZE_EPSILON,
) -> ReconstructionResult:
    """Reconstruct closed and open trades from one account's fills.

    Args:
        fills: Fill events in any order (sorted by timestamp here,
               ties keep their original order)
        max_fills: Upper bound on the batch size
        epsilon: Residual size at or below which a position counts as flat

    Returns:
        ReconstructionResult with one Trade per close fill, followed by
        one Open trade per instrument still holding a position

    Raises:
        FillLimitExceeded: If len(fills) > max_fills

    Example:
        >>> from journal_analytics.domain.models import FillAction
        >>> result = reconstruct_trades([
        ...     FillEvent("ETH", 100.0, 10.0, 1, FillAction.OPEN_LONG),
        ...     FillEvent("ETH", 120.0, 10.0, 2, FillAction.OPEN_LONG),
        ... ])
        >>> result.trades[0].entry_price
        110.0
    """
    if len(fills) > max_fills:
        raise FillLimitExceeded(len(fills), max_fills)

    stats = ReconstructionStats(fill_count=len(fills))
    trades: list[Trade] = []
    accumulators: dict[str, PositionAccumulator] = {}
    instruments: set[str] = set()

    for fill in sorted(fills, key=lambda f: f.timestamp):
        if fill.instrument:
            instruments.add(fill.instrument)

        if not fill.is_valid:
            stats.skipped_fills += 1
            continue

        if fill.action.is_open:
            _apply_open(fill, accumulators, stats)
        else:
            trades.append(_apply_close(fill, accumulators, stats, epsilon))

    # Whatever is left is still open
    for symbol, acc in accumulators.items():
        trades.append(Trade(
            symbol=symbol,
            direction=acc.direction,
            entry_price=acc.average_price,
            exit_price=None,
            quantity=acc.total_size,
            outcome=Outcome.OPEN,
            pnl=None,
            entry_time=timestamp_to_datetime(acc.first_entry_timestamp),
        ))

    stats.instrument_count = len(instruments)
    return ReconstructionResult(trades=tuple(trades), stats=stats)


def _apply_open(
    fill: FillEvent,
    accumulators: dict[str, PositionAccumulator],
    stats: ReconstructionStats,
) -> None:
    """Start or extend the position for the fill's instrument."""
    direction = fill.action.direction
    acc = accumulators.get(fill.instrument)

    if acc is None:
        accumulators[fill.instrument] = PositionAccumulator(
            direction=direction,
            total_size=fill.size,
            weighted_cost_sum=fill.price * fill.size,
            first_entry_timestamp=fill.timestamp,
        )
    elif acc.direction == direction:
        acc.add(fill.price, fill.size)
    else:
        stats.conflicting_opens += 1


def _apply_close(
    fill: FillEvent,
    accumulators: dict[str, PositionAccumulator],
    stats: ReconstructionStats,
    epsilon: float,
) -> Trade:
    """Emit the trade for a close fill and shrink the live position."""
    acc = accumulators.get(fill.instrument)

    if acc is None:
        stats.untracked_closes += 1
        direction: Direction = fill.action.direction
        entry_price = fill.price
        entry_timestamp = fill.timestamp
    else:
        direction = acc.direction
        entry_price = acc.average_price
        entry_timestamp = acc.first_entry_timestamp

    trade = Trade(
        symbol=fill.instrument,
        direction=direction,
        entry_price=entry_price,
        exit_price=fill.price,
        quantity=fill.size,
        outcome=determine_outcome(fill.realized_pnl),
        pnl=fill.realized_pnl,
        entry_time=timestamp_to_datetime(entry_timestamp),
        exit_time=timestamp_to_datetime(fill.timestamp),
    )

    if acc is not None:
        remaining = acc.total_size - fill.size
        if remaining < -epsilon:
            stats.overclosed_fills += 1
        if remaining <= epsilon:
            del accumulators[fill.instrument]
        else:
            acc.reduce(fill.size)

    return trade
