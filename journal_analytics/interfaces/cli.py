"""Command Line Interface for journal analytics.

Provides CLI access to analytics functions:
- import: Rebuild trades from an exchange fill export
- import-csv: Add trades from a user CSV file
- export: Write the journal as CSV
- stats: Show performance statistics
- risk: Show circuit breaker and exposure status
- compliance: Show rule compliance and loss correlation
- verify: Verify data integrity

Usage:
    python -m journal_analytics [--root DIR] import [--fills FILE]
    python -m journal_analytics stats [--by strategy] [--save]
    python -m journal_analytics risk
"""

import argparse
import logging
import sys
from pathlib import Path

from journal_analytics import __version__
from journal_analytics.domain.fills import FillLimitExceeded
from journal_analytics.domain.metrics.performance import AnalyticsResult
from journal_analytics.infrastructure import (
    DataPaths,
    DEFAULT_CONFIG,
    EngineConfig,
    RepositoryError,
    TradeRepository,
)
from journal_analytics.infrastructure.repositories import (
    FillRepository,
    parse_trade_csv,
    trades_to_csv,
)
from journal_analytics.application import (
    FillImportService,
    PerformanceReportService,
    RiskDashboardService,
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _paths(args: argparse.Namespace) -> DataPaths:
    return DataPaths(root=Path(args.root))


def _money(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:+,.2f}"


def _print_analytics(a: AnalyticsResult) -> None:
    pf = "∞" if a.profit_factor == float("inf") else f"{a.profit_factor:.2f}"
    sharpe = f"{a.sharpe_ratio:.2f}" if a.sharpe_ratio is not None else "-"

    print("【Trades】")
    print(f"  Total: {a.total_trades}  Closed: {a.closed_trades}  Open: {a.open_trades}")
    print(f"  Wins: {a.wins}  Losses: {a.losses}  Win rate: {a.win_rate_display}")
    print()
    print("【PNL】")
    print(f"  Total PNL:     {_money(a.total_pnl)}")
    print(f"  Avg PNL:       {_money(a.avg_pnl)}")
    print(f"  Avg win:       {_money(a.avg_win)}")
    print(f"  Avg loss:      {a.avg_loss:,.2f}")
    print(f"  Best trade:    {_money(a.best_trade)}")
    print(f"  Worst trade:   {_money(a.worst_trade)}")
    print()
    print("【Ratios】")
    print(f"  Profit factor: {pf}")
    print(f"  Expectancy:    {_money(a.expectancy)}")
    print(f"  Sharpe:        {sharpe}")
    print(f"  Max drawdown:  {a.max_drawdown:,.2f} ({a.max_drawdown_pct:.1f}%)")
    print(f"  Streaks:       {a.longest_win_streak}W / {a.longest_loss_streak}L")


def cmd_import(args: argparse.Namespace) -> int:
    """Import an exchange fill export."""
    paths = _paths(args)
    config = EngineConfig(max_fills=args.max_fills)
    service = FillImportService(paths=paths, config=config)

    path = Path(args.fills) if args.fills else None
    fills = FillRepository(paths, path=path).get_all()

    try:
        summary = service.run(fills)
    except FillLimitExceeded as e:
        print(f"Import refused: {e}")
        return 1

    stats = summary.stats
    print(f"Journal Analytics v{__version__}")
    print("=" * 50)
    print(f"Fills:        {stats.fill_count:,}")
    print(f"Instruments:  {stats.instrument_count}")
    print(f"Closed:       {summary.closed_count}")
    print(f"Open:         {summary.open_count}")
    if stats.skipped_fills or stats.conflicting_opens or stats.overclosed_fills:
        print(f"Skipped: {stats.skipped_fills}  Conflicting opens: "
              f"{stats.conflicting_opens}  Over-closed: {stats.overclosed_fills}")
    return 0


def cmd_import_csv(args: argparse.Namespace) -> int:
    """Add trades from a user CSV file."""
    try:
        content = Path(args.file).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Cannot read {args.file}: {e}")
        return 1

    result = parse_trade_csv(content)
    for err in result.errors:
        print(f"  row {err.row}: {err.message}")

    if not result.valid:
        print("No valid trades found")
        return 1

    stored = TradeRepository(_paths(args)).add(result.valid)
    print(f"Imported {len(stored)} trades ({len(result.errors)} rows rejected)")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Write the journal as CSV."""
    trades = TradeRepository(_paths(args)).get_all()
    Path(args.file).write_text(trades_to_csv(trades), encoding="utf-8")
    print(f"Exported {len(trades)} trades to {args.file}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Show performance statistics."""
    paths = _paths(args)
    formats = tuple(f.strip() for f in args.formats.split(","))
    unknown = [f for f in formats if f not in PerformanceReportService.OUTPUT_FORMATS]
    if unknown:
        print(f"Unknown format: {', '.join(unknown)} "
              f"(choose from {', '.join(PerformanceReportService.OUTPUT_FORMATS)})")
        return 1

    config = EngineConfig(output_formats=formats)
    service = PerformanceReportService(paths=paths, config=config)

    report = service.build_report()
    _print_analytics(report.analytics)

    if report.loss_streak_severity is not None:
        print()
        print(f"⚠ {report.loss_streak} consecutive losses ({report.loss_streak_severity})")

    if args.by:
        df = service.breakdown(args.by)
        print()
        print(f"【By {args.by}】")
        print(f"{'#':<4} {'Group':<16} {'Trades':>7} {'Win %':>7} {'PNL':>14}")
        print("-" * 52)
        for row in df.iter_rows(named=True):
            win_rate = f"{row['win_rate']:.1f}" if row["win_rate"] is not None else "N/A"
            print(f"{row['rank']:<4} {str(row['group'])[:16]:<16} "
                  f"{row['closed_trades']:>7} {win_rate:>7} {row['total_pnl']:>+14,.2f}")

        if args.save:
            for path in service.save_report(df, args.output):
                print(f"Saved: {path}")

    return 0


def cmd_risk(args: argparse.Namespace) -> int:
    """Show circuit breaker and exposure status."""
    snapshot = RiskDashboardService(paths=_paths(args)).evaluate()
    breaker = snapshot.breaker

    print("【Circuit Breaker】")
    status = "TRIPPED" if breaker.tripped else "ok"
    print(f"  Status:       {status}")
    print(f"  Daily loss:   {breaker.daily_loss:,.2f}"
          f"{'  (limit hit)' if breaker.daily_tripped else ''}")
    print(f"  Weekly loss:  {breaker.weekly_loss:,.2f}"
          f"{'  (limit hit)' if breaker.weekly_tripped else ''}")
    print()

    print("【Open Risk】")
    print(f"  Risk to stop: {snapshot.open_risk.total_risk:,.2f} "
          f"({snapshot.open_risk_pct:.1f}% of portfolio)")
    if snapshot.open_risk.has_unprotected:
        symbols = ", ".join(snapshot.open_risk.unprotected_symbols)
        print(f"  ⚠ {snapshot.open_risk.unprotected_count} open without stop: {symbols}")
    if snapshot.risk_budget is not None:
        print(f"  Risk budget per trade: {snapshot.risk_budget:,.2f}")
    print()

    print("【Concentration】")
    if not snapshot.concentrations:
        print("  No open positions")
    for c in snapshot.concentrations:
        flag = "  ⚠ over limit" if c.exceeds else ""
        print(f"  {c.symbol:<10} {c.exposure:>14,.2f} {c.pct:>6.1f}%{flag}")

    if snapshot.loss_streak_severity is not None:
        print()
        print(f"⚠ {snapshot.loss_streak} consecutive losses ({snapshot.loss_streak_severity})")

    return 2 if breaker.tripped else 0


def cmd_compliance(args: argparse.Namespace) -> int:
    """Show rule compliance and loss correlation."""
    report = PerformanceReportService(paths=_paths(args)).build_report()
    c = report.compliance

    print("【Rule Compliance】")
    if c.overall_compliance_rate is None:
        print("  No compliance observations recorded")
        return 0

    print(f"  Overall: {c.overall_compliance_rate * 100:.0f}%")
    print(f"  Avg loss (compliant):     {_money(c.avg_loss_compliant)} "
          f"[{c.compliant_loss_count}]")
    print(f"  Avg loss (non-compliant): {_money(c.avg_loss_non_compliant)} "
          f"[{c.non_compliant_loss_count}]")
    print()

    for rule in report.rules:
        print(f"  {rule.rate * 100:>4.0f}% ({rule.followed}/{rule.total})  {rule.rule}")

    stops = report.stops
    if stops.followed_count or stops.broke_count:
        print()
        print("【Stop Discipline】")
        print(f"  Followed stop: {stops.followed_count}  avg loss {_money(stops.avg_loss_followed)}")
        print(f"  Broke stop:    {stops.broke_count}  avg loss {_money(stops.avg_loss_broke)}")

    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify data integrity."""
    paths = _paths(args)
    print("【Data Verification】")
    print("=" * 50)

    errors = []

    print("\n1. Checking data files...")
    missing = paths.validate()
    if missing:
        for m in missing:
            print(f"  ✗ Missing: {m}")
            errors.append(f"Missing file: {m}")
    else:
        print("  ✓ Data directory present")

    print("\n2. Checking trade journal...")
    try:
        trades = TradeRepository(paths).get_all()
        closed = sum(1 for t in trades if t.is_closed)
        print(f"  Trades: {len(trades)} ({closed} closed)")
        missing_pnl = sum(1 for t in trades if t.is_closed and t.pnl is None)
        if missing_pnl:
            print(f"  ⚠ {missing_pnl} closed trades without PNL")
        else:
            print("  ✓ Journal readable")
    except RepositoryError as e:
        print(f"  ✗ Error: {e}")
        errors.append(str(e))

    print("\n3. Checking fill export...")
    if paths.fills_file.exists():
        try:
            fills = FillRepository(paths).get_all()
            invalid = sum(1 for f in fills if not f.is_valid)
            print(f"  Fills: {len(fills):,} ({invalid} malformed)")
            if len(fills) > DEFAULT_CONFIG.max_fills:
                print(f"  ⚠ Over the {DEFAULT_CONFIG.max_fills:,} fill import limit")
        except RepositoryError as e:
            print(f"  ✗ Error: {e}")
            errors.append(str(e))
    else:
        print("  - No fill export")

    print("\n" + "=" * 50)
    if errors:
        print(f"❌ {len(errors)} problem(s) found")
        return 1
    print("✅ All checks passed")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        prog="journal_analytics",
        description="Journal Analytics - Trade Reconstruction and Performance",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Project root containing data/ (default: current directory)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # import command
    import_parser = subparsers.add_parser("import", help="Import exchange fills")
    import_parser.add_argument(
        "--fills",
        help="Fill export JSON (default: data/fills.json)",
    )
    import_parser.add_argument(
        "--max-fills",
        type=int,
        default=DEFAULT_CONFIG.max_fills,
        help="Refuse batches larger than this",
    )

    # import-csv command
    csv_parser = subparsers.add_parser("import-csv", help="Import trades from CSV")
    csv_parser.add_argument("file", help="CSV file")

    # export command
    export_parser = subparsers.add_parser("export", help="Export journal as CSV")
    export_parser.add_argument("file", help="Output CSV file")

    # stats command
    stats_parser = subparsers.add_parser("stats", help="Show performance statistics")
    stats_parser.add_argument(
        "--by",
        choices=sorted(PerformanceReportService.GROUP_FIELDS),
        help="Break performance down by group",
    )
    stats_parser.add_argument(
        "-o", "--output",
        default="performance_report",
        help="Output filename (without extension)",
    )
    stats_parser.add_argument(
        "-f", "--formats",
        default="csv,parquet",
        help="Output formats (comma-separated)",
    )
    stats_parser.add_argument(
        "--save",
        action="store_true",
        help="Save the breakdown",
    )

    # risk / compliance / verify commands
    subparsers.add_parser("risk", help="Show risk status")
    subparsers.add_parser("compliance", help="Show rule compliance")
    subparsers.add_parser("verify", help="Verify data integrity")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    commands = {
        "import": cmd_import,
        "import-csv": cmd_import_csv,
        "export": cmd_export,
        "stats": cmd_stats,
        "risk": cmd_risk,
        "compliance": cmd_compliance,
        "verify": cmd_verify,
    }

    try:
        return commands[args.command](args)
    except RepositoryError as e:
        print(f"Error: {e}")
        return 1
