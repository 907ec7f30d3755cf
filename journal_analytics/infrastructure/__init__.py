"""Infrastructure layer for journal analytics.

Contains:
- config: Data paths, engine configuration and risk limits
- repositories: Data access abstractions
"""

from journal_analytics.infrastructure.config import (
    DataPaths,
    EngineConfig,
    RiskLimits,
    DEFAULT_PATHS,
    DEFAULT_CONFIG,
    DEFAULT_LIMITS,
)
from journal_analytics.infrastructure.repositories import (
    Repository,
    RepositoryError,
    FillRepository,
    TradeRepository,
    ComplianceRepository,
    RiskSettingsRepository,
)

__all__ = [
    # Config
    "DataPaths",
    "EngineConfig",
    "RiskLimits",
    "DEFAULT_PATHS",
    "DEFAULT_CONFIG",
    "DEFAULT_LIMITS",
    # Repositories
    "Repository",
    "RepositoryError",
    "FillRepository",
    "TradeRepository",
    "ComplianceRepository",
    "RiskSettingsRepository",
]
