"""Risk Dashboard Service: Current risk state of the journal.

Combines the user's risk limits with the trade snapshot:
- Daily/weekly circuit breaker
- Open exposure per symbol vs the concentration limit
- Open risk to stop, and positions without a stop
- Per-trade risk budget from portfolio value and max risk %

Nothing is stored; every call re-reads and recomputes.
"""

from dataclasses import dataclass
from datetime import datetime

from journal_analytics.domain.metrics import (
    CircuitBreakerStatus,
    OpenRiskSummary,
    SymbolConcentration,
    check_circuit_breaker,
    current_loss_streak,
    loss_streak_severity,
    max_risk_dollars,
    risk_as_percent_of_portfolio,
    summarize_open_risk,
    symbol_concentrations,
)
from journal_analytics.domain.models import Trade
from journal_analytics.infrastructure import (
    DataPaths,
    DEFAULT_PATHS,
    RiskLimits,
    TradeRepository,
    RiskSettingsRepository,
)


@dataclass(frozen=True, slots=True)
class RiskSnapshot:
    """Risk state for one evaluation.

    Attributes:
        breaker: Circuit breaker status
        concentrations: Open exposure per symbol, largest first
        open_risk: Risk to stop across open positions
        open_risk_pct: open_risk as % of portfolio (0 without portfolio value)
        risk_budget: Max loss per trade, None without portfolio/max risk %
        loss_streak: Current run of consecutive losses
        loss_streak_severity: None, "info", "warning" or "critical"
    """
    breaker: CircuitBreakerStatus
    concentrations: tuple[SymbolConcentration, ...]
    open_risk: OpenRiskSummary
    open_risk_pct: float
    risk_budget: float | None
    loss_streak: int
    loss_streak_severity: str | None

    @property
    def concentration_breaches(self) -> list[SymbolConcentration]:
        return [c for c in self.concentrations if c.exceeds]

    @property
    def has_alerts(self) -> bool:
        """Whether anything needs the trader's attention."""
        return (
            self.breaker.tripped
            or bool(self.concentration_breaches)
            or self.open_risk.has_unprotected
            or self.loss_streak_severity is not None
        )


class RiskDashboardService:
    """Evaluates the journal against the configured risk limits.

    Example:
        >>> service = RiskDashboardService()
        >>> snapshot = service.evaluate()
        >>> snapshot.breaker.tripped
    """

    def __init__(self, paths: DataPaths = DEFAULT_PATHS):
        self._trade_repo = TradeRepository(paths)
        self._settings_repo = RiskSettingsRepository(paths)

    def evaluate(
        self,
        trades: list[Trade] | None = None,
        limits: RiskLimits | None = None,
        now: datetime | None = None,
    ) -> RiskSnapshot:
        """Compute the current risk snapshot.

        Args:
            trades: Trade snapshot (loads the journal if not provided)
            limits: Risk limits (loads settings if not provided)
            now: Evaluation time (defaults to local now)

        Returns:
            RiskSnapshot
        """
        if trades is None:
            trades = self._trade_repo.get_all()
        if limits is None:
            limits = self._settings_repo.get_all()

        open_risk = summarize_open_risk(trades)

        if limits.portfolio_value is not None and limits.max_risk_pct is not None:
            risk_budget = max_risk_dollars(limits.portfolio_value, limits.max_risk_pct)
        else:
            risk_budget = None

        streak = current_loss_streak(trades)

        return RiskSnapshot(
            breaker=check_circuit_breaker(
                trades, limits.daily_loss_limit, limits.weekly_loss_limit, now
            ),
            concentrations=tuple(symbol_concentrations(
                trades, limits.portfolio_value, limits.max_concentration_pct
            )),
            open_risk=open_risk,
            open_risk_pct=risk_as_percent_of_portfolio(
                open_risk.total_risk, limits.portfolio_value
            ),
            risk_budget=risk_budget,
            loss_streak=streak,
            loss_streak_severity=loss_streak_severity(streak),
        )
