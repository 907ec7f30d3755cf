"""Performance Report Service: Journal-wide and grouped performance.

Orchestrates the performance report:
1. Load trades and compliance observations via repositories
2. Compute the analytics snapshot, loss streak, stop discipline
   and compliance correlation
3. Break performance down by strategy or symbol into a ranked DataFrame
4. Export breakdowns to various formats (CSV, Parquet, Excel)
"""

import math
from dataclasses import dataclass
from pathlib import Path

import polars as pl

from journal_analytics.domain.metrics import (
    AnalyticsResult,
    ComplianceCorrelation,
    RuleCompliance,
    StopDisciplineResult,
    compute_analytics,
    correlate_compliance,
    current_loss_streak,
    loss_streak_severity,
    rule_compliance_rates,
    stop_discipline,
)
from journal_analytics.domain.models import ComplianceObservation, Trade
from journal_analytics.infrastructure import (
    DataPaths,
    DEFAULT_PATHS,
    DEFAULT_CONFIG,
    EngineConfig,
    TradeRepository,
    ComplianceRepository,
)


# =============================================================================
# Report Data
# =============================================================================

@dataclass(frozen=True, slots=True)
class PerformanceReport:
    """Everything the performance panel shows for one trade snapshot."""
    analytics: AnalyticsResult
    loss_streak: int
    loss_streak_severity: str | None
    stops: StopDisciplineResult
    compliance: ComplianceCorrelation
    rules: tuple[RuleCompliance, ...]

    def to_dict(self) -> dict:
        return {
            **self.analytics.to_dict(),
            "loss_streak": self.loss_streak,
            "loss_streak_severity": self.loss_streak_severity,
            "stop_followed_count": self.stops.followed_count,
            "stop_broke_count": self.stops.broke_count,
            "avg_loss_followed_stop": self.stops.avg_loss_followed,
            "avg_loss_broke_stop": self.stops.avg_loss_broke,
            "avg_loss_compliant": self.compliance.avg_loss_compliant,
            "avg_loss_non_compliant": self.compliance.avg_loss_non_compliant,
            "overall_compliance_rate": self.compliance.overall_compliance_rate,
        }


# =============================================================================
# Report Service
# =============================================================================

class PerformanceReportService:
    """Service for performance reports over the trade journal.

    Example:
        >>> service = PerformanceReportService()
        >>> report = service.build_report()
        >>> df = service.breakdown("strategy")
        >>> service.save_report(df, "strategy_report")
    """

    # Formats save_report can write
    OUTPUT_FORMATS = ("csv", "parquet", "xlsx")

    # Column order for breakdown output
    BREAKDOWN_COLUMNS = [
        "rank",
        "group",
        "closed_trades",
        "open_trades",
        "wins",
        "losses",
        "win_rate",
        "total_pnl",
        "avg_pnl",
        "avg_win",
        "avg_loss",
        "profit_factor",
        "expectancy",
        "sharpe_ratio",
        "max_drawdown",
        "max_drawdown_pct",
        "best_trade",
        "worst_trade",
        "longest_win_streak",
        "longest_loss_streak",
    ]

    GROUP_FIELDS = {
        "strategy": lambda t: t.strategy_name or "No Strategy",
        "symbol": lambda t: t.symbol,
        "direction": lambda t: t.direction.value,
    }

    def __init__(
        self,
        paths: DataPaths = DEFAULT_PATHS,
        config: EngineConfig = DEFAULT_CONFIG,
        output_dir: Path | None = None,
    ):
        """Initialize the service.

        Args:
            paths: Data paths configuration
            config: Engine configuration (thresholds, output formats)
            output_dir: Directory for exported files (default: data/reports)
        """
        self._paths = paths
        self._config = config
        self._output_dir = output_dir or paths.reports_dir

        self._trade_repo = TradeRepository(paths)
        self._compliance_repo = ComplianceRepository(paths)

    def build_report(
        self,
        trades: list[Trade] | None = None,
        observations: list[ComplianceObservation] | None = None,
    ) -> PerformanceReport:
        """Compute the full performance report.

        Args:
            trades: Trade snapshot (loads the journal if not provided)
            observations: Compliance observations (loaded if not provided)

        Returns:
            PerformanceReport
        """
        if trades is None:
            trades = self._trade_repo.get_all()
        if observations is None:
            observations = self._compliance_repo.get_all()

        streak = current_loss_streak(trades)

        return PerformanceReport(
            analytics=compute_analytics(
                trades, annualization_days=self._config.annualization_days
            ),
            loss_streak=streak,
            loss_streak_severity=loss_streak_severity(streak),
            stops=stop_discipline(trades, self._config.stop_tolerance),
            compliance=correlate_compliance(
                trades, observations, self._config.compliance_threshold
            ),
            rules=tuple(rule_compliance_rates(observations)),
        )

    def breakdown(
        self,
        by: str = "strategy",
        trades: list[Trade] | None = None,
    ) -> pl.DataFrame:
        """Performance per group, ranked by total PNL.

        Args:
            by: "strategy", "symbol" or "direction"
            trades: Trade snapshot (loads the journal if not provided)

        Returns:
            DataFrame with BREAKDOWN_COLUMNS, one row per group
        """
        if by not in self.GROUP_FIELDS:
            raise ValueError(f"Unknown breakdown: {by}")
        if trades is None:
            trades = self._trade_repo.get_all()

        key = self.GROUP_FIELDS[by]
        groups: dict[str, list[Trade]] = {}
        for t in trades:
            groups.setdefault(key(t), []).append(t)

        rows = []
        for group, members in groups.items():
            row = compute_analytics(
                members, annualization_days=self._config.annualization_days
            ).to_dict()
            row["group"] = group
            # inf does not survive CSV/Excel round trips
            if math.isinf(row["profit_factor"]):
                row["profit_factor"] = None
            rows.append(row)

        if not rows:
            return pl.DataFrame(schema={c: pl.Utf8 for c in self.BREAKDOWN_COLUMNS})

        df = pl.DataFrame(rows, infer_schema_length=None)
        df = df.sort("total_pnl", descending=True)
        df = df.with_row_index("rank", offset=1)

        available_cols = [c for c in self.BREAKDOWN_COLUMNS if c in df.columns]
        return df.select(available_cols)

    def save_report(
        self,
        df: pl.DataFrame,
        base_name: str = "performance_report",
        formats: tuple[str, ...] | None = None,
    ) -> list[Path]:
        """Save report to specified formats.

        Args:
            df: Report DataFrame
            base_name: Base filename without extension
            formats: Output formats (uses config if not provided)

        Returns:
            List of saved file paths
        """
        formats = formats or self._config.output_formats
        self._output_dir.mkdir(parents=True, exist_ok=True)
        saved = []

        for fmt in formats:
            path = self._output_dir / f"{base_name}.{fmt}"

            if fmt == "csv":
                df.write_csv(path)
            elif fmt == "parquet":
                df.write_parquet(path)
            elif fmt == "xlsx":
                self._save_excel(df, path)
            else:
                raise ValueError(f"Unknown format: {fmt}")

            saved.append(path)

        return saved

    def _save_excel(self, df: pl.DataFrame, path: Path) -> None:
        """Save report to Excel with a summary and a full sheet."""
        import xlsxwriter

        workbook = xlsxwriter.Workbook(str(path))

        summary_cols = [
            c for c in ("rank", "group", "closed_trades", "win_rate", "total_pnl")
            if c in df.columns
        ]
        self._write_sheet(workbook, workbook.add_worksheet("Summary"), df, summary_cols)
        self._write_sheet(workbook, workbook.add_worksheet("Full Report"), df, df.columns)

        workbook.close()

    def _write_sheet(
        self,
        workbook,
        worksheet,
        df: pl.DataFrame,
        columns: list[str],
    ) -> None:
        """Write DataFrame columns to Excel worksheet."""
        header_fmt = workbook.add_format({
            "bold": True,
            "bg_color": "#4472C4",
            "font_color": "white",
            "border": 1,
        })
        money_fmt = workbook.add_format({"num_format": "#,##0.00"})
        pct_fmt = workbook.add_format({"num_format": "0.0"})

        money_cols = {
            "total_pnl", "avg_pnl", "avg_win", "avg_loss", "expectancy",
            "max_drawdown", "best_trade", "worst_trade",
        }
        pct_cols = {"win_rate", "max_drawdown_pct"}

        for col_idx, col_name in enumerate(columns):
            worksheet.write(0, col_idx, col_name, header_fmt)

        for row_idx, row in enumerate(df.select(columns).iter_rows(named=True), 1):
            for col_idx, col_name in enumerate(columns):
                value = row[col_name]
                if value is None:
                    worksheet.write(row_idx, col_idx, "")
                elif col_name in money_cols:
                    worksheet.write(row_idx, col_idx, value, money_fmt)
                elif col_name in pct_cols:
                    worksheet.write(row_idx, col_idx, value, pct_fmt)
                else:
                    worksheet.write(row_idx, col_idx, value)

        for col_idx, col_name in enumerate(columns):
            worksheet.set_column(col_idx, col_idx, max(len(col_name), 10))
