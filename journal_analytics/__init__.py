"""Journal Analytics: Trade reconstruction and performance analysis.

Rebuilds round-trip trades from exchange fills and computes performance,
risk and rule-compliance statistics over a trade journal.

Architecture:
- domain/: Core business logic (models, reconstruction, metrics)
- infrastructure/: I/O and external dependencies
- application/: Use cases and services
- interfaces/: CLI
"""

__version__ = "0.3.0"

from journal_analytics.domain import (
    Direction,
    Outcome,
    FillAction,
    FillEvent,
    Trade,
    ComplianceObservation,
    reconstruct_trades,
    compute_analytics,
)
from journal_analytics.infrastructure import (
    DataPaths,
    EngineConfig,
    RiskLimits,
    DEFAULT_PATHS,
    RepositoryError,
)

__all__ = [
    # Version
    "__version__",
    # Domain models
    "Direction",
    "Outcome",
    "FillAction",
    "FillEvent",
    "Trade",
    "ComplianceObservation",
    "reconstruct_trades",
    "compute_analytics",
    # Infrastructure
    "DataPaths",
    "EngineConfig",
    "RiskLimits",
    "DEFAULT_PATHS",
    "RepositoryError",
]
