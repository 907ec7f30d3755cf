"""Domain Layer: Core business logic and entities.

This layer contains:
- models.py: Data structures (FillEvent, Trade, ComplianceObservation)
- fills.py: Weighted-average trade reconstruction from exchange fills
- metrics/: Performance, risk and compliance calculations

Nothing in this layer performs I/O.
"""

from journal_analytics.domain.models import (
    Direction,
    Outcome,
    FillAction,
    FillEvent,
    PositionAccumulator,
    Trade,
    ComplianceObservation,
    determine_outcome,
    calculate_pnl,
    timestamp_to_datetime,
)
from journal_analytics.domain.fills import (
    MAX_FILLS,
    SIZE_EPSILON,
    FillLimitExceeded,
    ReconstructionStats,
    ReconstructionResult,
    reconstruct_trades,
)
from journal_analytics.domain.metrics import (
    # Performance
    AnalyticsResult,
    compute_analytics,
    current_loss_streak,
    loss_streak_severity,
    # Risk
    CircuitBreakerStatus,
    SymbolConcentration,
    OpenRiskSummary,
    check_circuit_breaker,
    symbol_concentrations,
    aggregate_open_risk,
    summarize_open_risk,
    # Compliance
    ComplianceCorrelation,
    correlate_compliance,
)

__all__ = [
    # Models
    "Direction",
    "Outcome",
    "FillAction",
    "FillEvent",
    "PositionAccumulator",
    "Trade",
    "ComplianceObservation",
    "determine_outcome",
    "calculate_pnl",
    "timestamp_to_datetime",
    # Reconstruction
    "MAX_FILLS",
    "SIZE_EPSILON",
    "FillLimitExceeded",
    "ReconstructionStats",
    "ReconstructionResult",
    "reconstruct_trades",
    # Metrics - Performance
    "AnalyticsResult",
    "compute_analytics",
    "current_loss_streak",
    "loss_streak_severity",
    # Metrics - Risk
    "CircuitBreakerStatus",
    "SymbolConcentration",
    "OpenRiskSummary",
    "check_circuit_breaker",
    "symbol_concentrations",
    "aggregate_open_risk",
    "summarize_open_risk",
    # Metrics - Compliance
    "ComplianceCorrelation",
    "correlate_compliance",
]
