"""Trading metrics for trade journal analysis.

This package provides metrics over a reconstructed trade collection:

- Performance: Win rate, expectancy, Sharpe, drawdown, streaks
- Risk: Circuit breakers, symbol concentration, open risk, stop discipline
- Compliance: Loss size of rule-compliant vs non-compliant trades

Usage:
    from journal_analytics.domain.metrics import (
        compute_analytics,
        check_circuit_breaker,
        correlate_compliance,
    )
"""

# Performance
from journal_analytics.domain.metrics.performance import (
    TRADING_DAYS_PER_YEAR,
    AnalyticsResult,
    DrawdownResult,
    StreakResult,
    compute_analytics,
    compute_sharpe,
    compute_max_drawdown,
    compute_streaks,
    current_loss_streak,
    loss_streak_severity,
)

# Risk
from journal_analytics.domain.metrics.risk import (
    CircuitBreakerStatus,
    SymbolConcentration,
    OpenRiskSummary,
    StopDisciplineResult,
    daily_loss,
    weekly_loss,
    check_circuit_breaker,
    symbol_concentrations,
    aggregate_open_risk,
    summarize_open_risk,
    max_risk_dollars,
    risk_as_percent_of_portfolio,
    stop_discipline,
)

# Compliance
from journal_analytics.domain.metrics.compliance import (
    COMPLIANCE_THRESHOLD,
    ComplianceCorrelation,
    RuleCompliance,
    trade_compliance_rates,
    correlate_compliance,
    rule_compliance_rates,
)

__all__ = [
    # Performance
    "TRADING_DAYS_PER_YEAR",
    "AnalyticsResult",
    "DrawdownResult",
    "StreakResult",
    "compute_analytics",
    "compute_sharpe",
    "compute_max_drawdown",
    "compute_streaks",
    "current_loss_streak",
    "loss_streak_severity",
    # Risk
    "CircuitBreakerStatus",
    "SymbolConcentration",
    "OpenRiskSummary",
    "StopDisciplineResult",
    "daily_loss",
    "weekly_loss",
    "check_circuit_breaker",
    "symbol_concentrations",
    "aggregate_open_risk",
    "summarize_open_risk",
    "max_risk_dollars",
    "risk_as_percent_of_portfolio",
    "stop_discipline",
    # Compliance
    "COMPLIANCE_THRESHOLD",
    "ComplianceCorrelation",
    "RuleCompliance",
    "trade_compliance_rates",
    "correlate_compliance",
    "rule_compliance_rates",
]
