"""Performance Metrics: Aggregate statistics over a trade journal.

Everything is recomputed from scratch on each call; nothing is cached.

Conventions:
- Closed trades are every outcome except "Open"
- Sequence-dependent metrics (Sharpe, drawdown, streaks) walk closed
  trades in chronological order of entry
- Degenerate inputs resolve to sentinels (None, 0, inf), never errors

Sharpe annualization assumes roughly one trade per trading day, which is a
simplification for arbitrary trade cadence. The factor is exposed as
TRADING_DAYS_PER_YEAR and can be overridden per call.
"""

import math
from dataclasses import asdict, dataclass
from typing import Sequence

from journal_analytics.domain.models import Outcome, Trade

TRADING_DAYS_PER_YEAR = 252


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True, slots=True)
class DrawdownResult:
    """Largest peak-to-trough decline of cumulative PNL.

    Attributes:
        max_drawdown: Largest (peak - cumulative) observed, >= 0
        max_drawdown_pct: max_drawdown / peak * 100 at that point
                          (0 when the peak was not positive)
    """
    max_drawdown: float
    max_drawdown_pct: float


@dataclass(frozen=True, slots=True)
class StreakResult:
    """Longest consecutive runs of wins and losses."""
    longest_win_streak: int
    longest_loss_streak: int


@dataclass(frozen=True, slots=True)
class AnalyticsResult:
    """Performance snapshot of a trade collection.

    Attributes:
        total_trades: All trades, open and closed
        open_trades: Trades with outcome "Open"
        closed_trades: Everything else
        wins: Closed trades with outcome "Win"
        losses: Closed trades with outcome "Loss"
        win_rate: Wins / closed * 100, None when nothing is closed
        total_pnl: Sum of closed PNL
        avg_pnl: Mean closed PNL
        avg_win: Mean PNL of wins
        avg_loss: Mean |PNL| of losses
        profit_factor: Gross profit / gross loss (inf when no losses)
        expectancy: Expected PNL per trade from win rate and averages
        sharpe_ratio: Annualized per-trade Sharpe, None when undefined
        max_drawdown: Largest decline of cumulative PNL
        max_drawdown_pct: That decline as % of the running peak
        best_trade: Largest closed PNL
        worst_trade: Smallest closed PNL
        longest_win_streak: Longest run of consecutive wins
        longest_loss_streak: Longest run of consecutive losses
    """
    total_trades: int
    open_trades: int
    closed_trades: int
    wins: int
    losses: int
    win_rate: float | None
    total_pnl: float
    avg_pnl: float
    avg_win: float
    avg_loss: float
    profit_factor: float
    expectancy: float
    sharpe_ratio: float | None
    max_drawdown: float
    max_drawdown_pct: float
    best_trade: float | None
    worst_trade: float | None
    longest_win_streak: int
    longest_loss_streak: int

    @property
    def win_rate_display(self) -> str:
        """Win rate for display, "N/A" when no trade is closed."""
        if self.win_rate is None:
            return "N/A"
        return f"{self.win_rate:.1f}%"

    def to_dict(self) -> dict:
        return asdict(self)


# =============================================================================
# Component Calculations
# =============================================================================

def compute_sharpe(
    pnls: Sequence[float],
    annualization_days: int = TRADING_DAYS_PER_YEAR,
) -> float | None:
    """Annualized Sharpe ratio of a per-trade PNL series.

    Formula:
        sharpe = mean / stdev * sqrt(annualization_days)

    where stdev is the sample standard deviation (divides by n - 1).

    Args:
        pnls: Per-trade PNL in chronological order
        annualization_days: Trades assumed per year

    Returns:
        Sharpe ratio, or None with fewer than 2 values or zero variance
    """
    n = len(pnls)
    if n < 2 or max(pnls) == min(pnls):
        return None

    mean = sum(pnls) / n
    variance = sum((p - mean) ** 2 for p in pnls) / (n - 1)
    std_dev = math.sqrt(variance)
    if std_dev == 0:
        return None

    return (mean / std_dev) * math.sqrt(annualization_days)


def compute_max_drawdown(pnls: Sequence[float]) -> DrawdownResult:
    """Scan cumulative PNL for the largest decline from a running peak.

    The running peak starts at zero, so losses before any gain count
    as drawdown with a 0% figure.

    Example:
        >>> compute_max_drawdown([100, -50, 30, -120])
        DrawdownResult(max_drawdown=140.0, max_drawdown_pct=140.0)
    """
    cumulative = 0.0
    peak = 0.0
    max_dd = 0.0
    max_dd_pct = 0.0

    for pnl in pnls:
        cumulative += pnl
        if cumulative > peak:
            peak = cumulative
        dd = peak - cumulative
        if dd > max_dd:
            max_dd = dd
            max_dd_pct = dd / peak * 100 if peak > 0 else 0.0

    return DrawdownResult(max_drawdown=max_dd, max_drawdown_pct=max_dd_pct)


def compute_streaks(closed: Sequence[Trade]) -> StreakResult:
    """Longest win and loss runs over closed trades.

    Trades are ordered by entry time here. A breakeven trade ends both runs.
    """
    win_streak = loss_streak = 0
    max_win = max_loss = 0

    for trade in _chronological(closed):
        if trade.outcome == Outcome.WIN:
            win_streak += 1
            loss_streak = 0
            max_win = max(max_win, win_streak)
        elif trade.outcome == Outcome.LOSS:
            loss_streak += 1
            win_streak = 0
            max_loss = max(max_loss, loss_streak)
        else:
            win_streak = 0
            loss_streak = 0

    return StreakResult(longest_win_streak=max_win, longest_loss_streak=max_loss)


def current_loss_streak(trades: Sequence[Trade]) -> int:
    """Number of consecutive losses ending at the most recent closed trade."""
    closed = [t for t in trades if t.is_closed]
    streak = 0
    for trade in reversed(_chronological(closed)):
        if trade.outcome != Outcome.LOSS:
            break
        streak += 1
    return streak


def loss_streak_severity(streak: int) -> str | None:
    """Warning level for a run of consecutive losses.

    Returns:
        None below 2 losses, then "info" (2), "warning" (3-4),
        "critical" (5+)
    """
    if streak < 2:
        return None
    if streak >= 5:
        return "critical"
    if streak >= 3:
        return "warning"
    return "info"


# =============================================================================
# Full Snapshot
# =============================================================================

def compute_analytics(
    trades: Sequence[Trade],
    *,
    annualization_days: int = TRADING_DAYS_PER_YEAR,
) -> AnalyticsResult:
    """Compute the full performance snapshot of a trade collection.

    Args:
        trades: Open and closed trades, any order
        annualization_days: Sharpe annualization factor

    Returns:
        AnalyticsResult
    """
    closed = _chronological([t for t in trades if t.is_closed])
    open_count = sum(1 for t in trades if t.is_open)

    pnls = [float(t.pnl or 0.0) for t in closed]
    win_pnls = [p for t, p in zip(closed, pnls) if t.outcome == Outcome.WIN]
    loss_pnls = [p for t, p in zip(closed, pnls) if t.outcome == Outcome.LOSS]

    n_closed = len(closed)
    wins = len(win_pnls)
    losses = len(loss_pnls)

    total_pnl = sum(pnls, 0.0)
    gross_profit = sum(win_pnls, 0.0)
    gross_loss = abs(sum(loss_pnls, 0.0))

    avg_pnl = total_pnl / n_closed if n_closed else 0.0
    avg_win = gross_profit / wins if wins else 0.0
    avg_loss = gross_loss / losses if losses else 0.0

    if gross_loss > 0:
        profit_factor = gross_profit / gross_loss
    else:
        profit_factor = math.inf if gross_profit > 0 else 0.0

    if n_closed:
        win_fraction = wins / n_closed
        win_rate = win_fraction * 100
        expectancy = win_fraction * avg_win - (1 - win_fraction) * avg_loss
    else:
        win_rate = None
        expectancy = 0.0

    drawdown = compute_max_drawdown(pnls)
    streaks = compute_streaks(closed)

    return AnalyticsResult(
        total_trades=len(trades),
        open_trades=open_count,
        closed_trades=n_closed,
        wins=wins,
        losses=losses,
        win_rate=win_rate,
        total_pnl=total_pnl,
        avg_pnl=avg_pnl,
        avg_win=avg_win,
        avg_loss=avg_loss,
        profit_factor=profit_factor,
        expectancy=expectancy,
        sharpe_ratio=compute_sharpe(pnls, annualization_days),
        max_drawdown=drawdown.max_drawdown,
        max_drawdown_pct=drawdown.max_drawdown_pct,
        best_trade=max(pnls) if pnls else None,
        worst_trade=min(pnls) if pnls else None,
        longest_win_streak=streaks.longest_win_streak,
        longest_loss_streak=streaks.longest_loss_streak,
    )


def _chronological(trades: Sequence[Trade]) -> list[Trade]:
    return sorted(trades, key=lambda t: t.entry_time)
