"""Application Services for journal analytics.

Services orchestrate repository access to implement use cases.

Available services:
- FillImportService: Exchange fills -> stored trade journal
- PerformanceReportService: Performance, compliance and grouped reports
- RiskDashboardService: Circuit breaker, concentration and open risk
"""

from journal_analytics.application.services.fill_import import (
    FillImportService,
    ImportSummary,
)
from journal_analytics.application.services.performance_report import (
    PerformanceReportService,
    PerformanceReport,
)
from journal_analytics.application.services.risk_dashboard import (
    RiskDashboardService,
    RiskSnapshot,
)

__all__ = [
    "FillImportService",
    "ImportSummary",
    "PerformanceReportService",
    "PerformanceReport",
    "RiskDashboardService",
    "RiskSnapshot",
]
