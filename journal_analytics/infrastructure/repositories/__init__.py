"""Data repositories for journal analytics.

Provides abstracted data access through the Repository pattern:
- FillRepository: Raw exchange fills
- TradeRepository: Trade journal (read + append), user CSV import/export
- ComplianceRepository: Rule compliance observations
- RiskSettingsRepository: User risk limits
"""

from journal_analytics.infrastructure.repositories.base import Repository, RepositoryError
from journal_analytics.infrastructure.repositories.fill_repo import (
    FillRepository,
    parse_exchange_fill,
)
from journal_analytics.infrastructure.repositories.trade_repo import (
    TradeRepository,
    CsvParseResult,
    CsvRowError,
    parse_trade_csv,
    trades_to_csv,
)
from journal_analytics.infrastructure.repositories.compliance_repo import (
    ComplianceRepository,
)
from journal_analytics.infrastructure.repositories.settings_repo import (
    RiskSettingsRepository,
)

__all__ = [
    "Repository",
    "RepositoryError",
    "FillRepository",
    "parse_exchange_fill",
    "TradeRepository",
    "CsvParseResult",
    "CsvRowError",
    "parse_trade_csv",
    "trades_to_csv",
    "ComplianceRepository",
    "RiskSettingsRepository",
]
