"""Fill Import Service: Exchange fills -> stored trade journal.

Orchestrates one import:
1. Load the exported fill batch via FillRepository
2. Check the batch against the configured cap (before any work)
3. Reconstruct trades with weighted-average cost accounting
4. Append the trades to the journal via TradeRepository

The journal is insert-only: importing the same export twice stores the
trades twice.
"""

import logging
from dataclasses import dataclass, replace

from journal_analytics.domain.fills import (
    ReconstructionStats,
    reconstruct_trades,
)
from journal_analytics.domain.models import FillEvent, Trade
from journal_analytics.infrastructure.config import (
    DataPaths,
    DEFAULT_PATHS,
    DEFAULT_CONFIG,
    EngineConfig,
)
from journal_analytics.infrastructure.repositories import (
    FillRepository,
    TradeRepository,
)

logger = logging.getLogger(__name__)

IMPORT_TAG = "[TAGS] hyperliquid"


@dataclass(frozen=True, slots=True)
class ImportSummary:
    """Result of one fill import.

    Attributes:
        stats: Reconstruction counters
        closed_count: Closed trades stored
        open_count: Open positions stored
        trades: The stored trades (with ids)
    """
    stats: ReconstructionStats
    closed_count: int
    open_count: int
    trades: tuple[Trade, ...]

    @property
    def trade_count(self) -> int:
        return len(self.trades)

    def to_dict(self) -> dict:
        return {
            "fill_count": self.stats.fill_count,
            "instrument_count": self.stats.instrument_count,
            "skipped_fills": self.stats.skipped_fills,
            "conflicting_opens": self.stats.conflicting_opens,
            "untracked_closes": self.stats.untracked_closes,
            "overclosed_fills": self.stats.overclosed_fills,
            "closed_count": self.closed_count,
            "open_count": self.open_count,
        }


class FillImportService:
    """Imports an exchange fill export into the trade journal.

    Example:
        >>> service = FillImportService()
        >>> summary = service.run()
        >>> print(f"{summary.closed_count} closed, {summary.open_count} open")
    """

    def __init__(
        self,
        paths: DataPaths = DEFAULT_PATHS,
        config: EngineConfig = DEFAULT_CONFIG,
    ):
        self._config = config
        self._fill_repo = FillRepository(paths)
        self._trade_repo = TradeRepository(paths)

    def run(self, fills: list[FillEvent] | None = None) -> ImportSummary:
        """Reconstruct and store trades.

        Args:
            fills: Fill batch to import (loads the export if not provided)

        Returns:
            ImportSummary

        Raises:
            FillLimitExceeded: If the batch exceeds config.max_fills
            RepositoryError: If fills cannot be loaded or trades stored
        """
        if fills is None:
            fills = self._fill_repo.get_all()

        logger.info("Reconstructing trades from %d fills", len(fills))
        result = reconstruct_trades(
            fills,
            max_fills=self._config.max_fills,
            epsilon=self._config.size_epsilon,
        )
        stats = result.stats
        self._log_stats(stats)

        tagged = [replace(t, notes=IMPORT_TAG) for t in result.trades]
        stored = self._trade_repo.add(tagged)

        summary = ImportSummary(
            stats=stats,
            closed_count=sum(1 for t in stored if t.is_closed),
            open_count=sum(1 for t in stored if t.is_open),
            trades=tuple(stored),
        )
        logger.info(
            "Stored %d trades (%d closed, %d open) across %d instruments",
            summary.trade_count, summary.closed_count,
            summary.open_count, stats.instrument_count,
        )
        return summary

    def _log_stats(self, stats: ReconstructionStats) -> None:
        if stats.skipped_fills:
            logger.warning("Skipped %d malformed fills", stats.skipped_fills)
        if stats.conflicting_opens:
            logger.warning(
                "Ignored %d opens against an opposite-side position",
                stats.conflicting_opens,
            )
        if stats.untracked_closes:
            logger.info(
                "%d closes had no tracked open; used fill price as entry",
                stats.untracked_closes,
            )
        if stats.overclosed_fills:
            logger.warning(
                "%d closes exceeded the open position size",
                stats.overclosed_fills,
            )
