"""Application Layer: Use cases and service orchestration.

This layer contains:
- services/: Business logic orchestration
  - fill_import.py: Fill export import into the journal
  - performance_report.py: Performance and compliance reporting
  - risk_dashboard.py: Risk limit evaluation
"""

from journal_analytics.application.services import (
    FillImportService,
    ImportSummary,
    PerformanceReportService,
    PerformanceReport,
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
