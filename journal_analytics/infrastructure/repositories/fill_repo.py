"""Fill Repository: Access to raw exchange fills.

Reads data/fills.json, a JSON array of fills as exported by the exchange
(Hyperliquid "userFillsByTime" shape):

    {"coin": "BTC", "px": "65000.5", "sz": "0.01", "time": 1700000000000,
     "dir": "Open Long", "closedPnl": "0.0", "fee": "0.02", ...}

Numbers arrive as strings. Values that do not parse become fills the
reconstruction skips, so one bad record never fails the import.
"""

import json
import math
from pathlib import Path
from typing import Any

from journal_analytics.domain.models import FillAction, FillEvent
from journal_analytics.infrastructure.repositories.base import Repository, RepositoryError
from journal_analytics.infrastructure.config import DataPaths, DEFAULT_PATHS


def _to_float(value: Any) -> float:
    """Parse an exchange number, NaN when unusable."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return math.nan
    return number


def _to_int(value: Any) -> int:
    """Parse an exchange timestamp, -1 (an invalid fill) when unusable."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return -1


def parse_exchange_fill(raw: dict[str, Any]) -> FillEvent:
    """Convert one exchange fill record to a FillEvent.

    Unknown "dir" labels (e.g. spot "Buy"/"Sell") map to action None.
    NaN price/size fail FillEvent.is_valid; NaN PNL/fee fall back to 0.

    Example:
        >>> fill = parse_exchange_fill({
        ...     "coin": "ETH", "px": "2000", "sz": "1.5", "time": 1,
        ...     "dir": "Open Long", "closedPnl": "0", "fee": "0.3",
        ... })
        >>> fill.action
        <FillAction.OPEN_LONG: 'Open Long'>
    """
    realized = _to_float(raw.get("closedPnl", 0))
    fee = _to_float(raw.get("fee", 0))
    return FillEvent(
        instrument=str(raw.get("coin") or ""),
        price=_to_float(raw.get("px")),
        size=_to_float(raw.get("sz")),
        timestamp=_to_int(raw.get("time")),
        action=FillAction.parse(raw.get("dir")),
        realized_pnl=0.0 if math.isnan(realized) else realized,
        fee=0.0 if math.isnan(fee) else fee,
    )


class FillRepository(Repository[list[FillEvent]]):
    """Repository for raw exchange fills.

    Fetching fills from the exchange (pagination, retries) happens
    elsewhere; this repository reads the exported, de-duplicated batch.

    Example:
        >>> repo = FillRepository()
        >>> fills = repo.get_all()
        >>> other = FillRepository(path=Path("exports/march.json"))
    """

    def __init__(self, paths: DataPaths = DEFAULT_PATHS, path: Path | None = None):
        """Initialize the repository.

        Args:
            paths: Data paths configuration
            path: Fill export to read instead of paths.fills_file
        """
        self._path = path or paths.fills_file
        self._cache: list[FillEvent] | None = None

    def get_all(self) -> list[FillEvent]:
        """Load and parse all fills.

        Returns:
            Fills in file order

        Raises:
            RepositoryError: If the file is missing or not a JSON array
        """
        if self._cache is not None:
            return self._cache

        path = self._path
        if not path.exists():
            raise RepositoryError("Fill export not found", str(path))

        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RepositoryError(f"Failed to read fills: {e}", str(path))

        if not isinstance(raw, list):
            raise RepositoryError("Fill export must be a JSON array", str(path))

        self._cache = [parse_exchange_fill(r) for r in raw if isinstance(r, dict)]
        return self._cache

    def count(self) -> int:
        """Number of fill records in the export."""
        return len(self.get_all())

    def clear_cache(self) -> None:
        """Clear cached data."""
        self._cache = None
