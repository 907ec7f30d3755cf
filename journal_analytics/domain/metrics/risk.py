"""Risk Metrics: Circuit breakers, concentration and open risk.

All functions read a trade snapshot plus static limits and keep no state.
A breaker is "tripped" only while the period's realized losses stay at or
above its limit; nothing is latched.

Loss windows are calendar based in the evaluation timezone:
- Daily: since local midnight
- Weekly: since local midnight on Monday
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence

from journal_analytics.domain.models import Outcome, Trade

STOP_TOLERANCE = 1.1


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True, slots=True)
class CircuitBreakerStatus:
    """Realized losses for the current day/week against their limits."""
    daily_loss: float
    weekly_loss: float
    daily_tripped: bool
    weekly_tripped: bool
    tripped: bool


@dataclass(frozen=True, slots=True)
class SymbolConcentration:
    """Open exposure in one symbol relative to the portfolio.

    Attributes:
        symbol: Instrument symbol
        exposure: Sum of entry_price * quantity over open trades
        pct: Exposure as % of portfolio value (0 if no portfolio value)
        exceeds: Whether pct is above the configured maximum
    """
    symbol: str
    exposure: float
    pct: float
    exceeds: bool


@dataclass(frozen=True, slots=True)
class OpenRiskSummary:
    """Risk to stop across open trades.

    Trades without a stop have no bounded risk and are only counted.
    """
    total_risk: float
    protected_count: int
    unprotected_count: int
    unprotected_symbols: tuple[str, ...]

    @property
    def has_unprotected(self) -> bool:
        return self.unprotected_count > 0


@dataclass(frozen=True, slots=True)
class StopDisciplineResult:
    """Planned (to stop) vs actual loss on losing trades that had a stop.

    Attributes:
        followed_count: Losses within tolerance of the planned risk
        broke_count: Losses beyond tolerance
        avg_loss_followed: Mean |PNL| of followed-stop losses (None if empty)
        avg_loss_broke: Mean |PNL| of broken-stop losses (None if empty)
    """
    followed_count: int
    broke_count: int
    avg_loss_followed: float | None
    avg_loss_broke: float | None


# =============================================================================
# Period Losses
# =============================================================================

def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(moment: datetime) -> datetime:
    """Local midnight of the Monday on or before moment."""
    return start_of_day(moment) - timedelta(days=moment.weekday())


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def closed_losses_since(trades: Sequence[Trade], since: datetime) -> float:
    """Sum of |PNL| over losing closed trades closed at or after since."""
    total = 0.0
    for t in trades:
        if not t.is_closed or t.pnl is None or t.pnl >= 0:
            continue
        if t.closed_at >= since:
            total += abs(t.pnl)
    return total


def daily_loss(trades: Sequence[Trade], now: datetime | None = None) -> float:
    now = _resolve_now(now)
    return closed_losses_since(trades, start_of_day(now))


def weekly_loss(trades: Sequence[Trade], now: datetime | None = None) -> float:
    now = _resolve_now(now)
    return closed_losses_since(trades, start_of_week(now))


def check_circuit_breaker(
    trades: Sequence[Trade],
    daily_limit: float | None,
    weekly_limit: float | None,
    now: datetime | None = None,
) -> CircuitBreakerStatus:
    """Evaluate daily and weekly loss limits.

    Args:
        trades: Trade snapshot
        daily_limit: Max realized loss per day (None disables)
        weekly_limit: Max realized loss per week (None disables)
        now: Evaluation time, defaults to the local current time

    Returns:
        CircuitBreakerStatus
    """
    now = _resolve_now(now)
    d_loss = daily_loss(trades, now)
    w_loss = weekly_loss(trades, now)
    daily_tripped = daily_limit is not None and d_loss >= daily_limit
    weekly_tripped = weekly_limit is not None and w_loss >= weekly_limit

    return CircuitBreakerStatus(
        daily_loss=d_loss,
        weekly_loss=w_loss,
        daily_tripped=daily_tripped,
        weekly_tripped=weekly_tripped,
        tripped=daily_tripped or weekly_tripped,
    )


# =============================================================================
# Exposure
# =============================================================================

def symbol_concentrations(
    trades: Sequence[Trade],
    portfolio_value: float | None,
    max_pct: float | None,
) -> list[SymbolConcentration]:
    """Open exposure per symbol, largest share of the portfolio first."""
    by_symbol: dict[str, float] = {}
    for t in trades:
        if t.is_open:
            by_symbol[t.symbol] = by_symbol.get(t.symbol, 0.0) + t.entry_price * t.quantity

    result = []
    for symbol, exposure in by_symbol.items():
        pct = risk_as_percent_of_portfolio(exposure, portfolio_value)
        result.append(SymbolConcentration(
            symbol=symbol,
            exposure=exposure,
            pct=pct,
            exceeds=max_pct is not None and pct > max_pct,
        ))

    return sorted(result, key=lambda c: c.pct, reverse=True)


def aggregate_open_risk(trades: Sequence[Trade]) -> float:
    """Sum of |entry - stop| * quantity over open trades with a stop."""
    return summarize_open_risk(trades).total_risk


def summarize_open_risk(trades: Sequence[Trade]) -> OpenRiskSummary:
    """Open risk to stop, plus the open trades that have no stop."""
    total = 0.0
    protected = 0
    unprotected: list[str] = []

    for t in trades:
        if not t.is_open:
            continue
        risk = t.planned_risk
        if risk is None:
            unprotected.append(t.symbol)
        else:
            total += risk
            protected += 1

    return OpenRiskSummary(
        total_risk=total,
        protected_count=protected,
        unprotected_count=len(unprotected),
        unprotected_symbols=tuple(unprotected),
    )


# =============================================================================
# Position Sizing
# =============================================================================

def max_risk_dollars(portfolio_value: float, max_risk_pct: float) -> float:
    """Largest loss allowed on one trade for a given risk percentage."""
    return portfolio_value * (max_risk_pct / 100)


def risk_as_percent_of_portfolio(
    risk: float,
    portfolio_value: float | None,
) -> float:
    """Express an amount as % of the portfolio (0 with no portfolio value)."""
    if portfolio_value is None or portfolio_value <= 0:
        return 0.0
    return risk / portfolio_value * 100


def stop_discipline(
    trades: Sequence[Trade],
    tolerance: float = STOP_TOLERANCE,
) -> StopDisciplineResult:
    """Compare actual losses with the risk planned at the stop.

    A loss up to planned_risk * tolerance counts as the stop being honored.
    """
    followed: list[float] = []
    broke: list[float] = []

    for t in trades:
        if t.outcome != Outcome.LOSS or t.pnl is None:
            continue
        planned = t.planned_risk
        if planned is None:
            continue
        actual = abs(t.pnl)
        if actual <= planned * tolerance:
            followed.append(actual)
        else:
            broke.append(actual)

    return StopDisciplineResult(
        followed_count=len(followed),
        broke_count=len(broke),
        avg_loss_followed=sum(followed) / len(followed) if followed else None,
        avg_loss_broke=sum(broke) / len(broke) if broke else None,
    )
