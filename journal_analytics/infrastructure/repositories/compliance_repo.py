"""Compliance Repository: Access to rule compliance observations.

Provides read access to data/compliance.csv with columns:
    trade_id, rule_id, rule_text, followed

"followed" accepts true/false, yes/no, 1/0 (case-insensitive).
"""

from journal_analytics.domain.models import ComplianceObservation
from journal_analytics.infrastructure.repositories.base import (
    Repository,
    RepositoryError,
    read_string_csv,
)
from journal_analytics.infrastructure.config import DataPaths, DEFAULT_PATHS

TRUTHY = frozenset({"true", "yes", "y", "1"})
FALSY = frozenset({"false", "no", "n", "0"})


def parse_followed(value: str | None) -> bool:
    """Parse a followed flag.

    Raises:
        ValueError: If the value is not a recognized boolean
    """
    text = (value or "").strip().lower()
    if text in TRUTHY:
        return True
    if text in FALSY:
        return False
    raise ValueError(f"followed must be a boolean, got: {value!r}")


class ComplianceRepository(Repository[list[ComplianceObservation]]):
    """Repository for compliance observations.

    A missing file means no observations were recorded.

    Example:
        >>> repo = ComplianceRepository()
        >>> observations = repo.get_all()
        >>> for_trade = repo.get_by_trade("a1b2c3")
    """

    def __init__(self, paths: DataPaths = DEFAULT_PATHS):
        self._paths = paths
        self._cache: list[ComplianceObservation] | None = None

    def get_all(self) -> list[ComplianceObservation]:
        """Load all observations.

        Raises:
            RepositoryError: If the file is unreadable or a row is invalid
        """
        if self._cache is not None:
            return self._cache

        path = self._paths.compliance_file
        if not path.exists():
            return []

        df = read_string_csv(path, "Compliance observations")
        missing = {"trade_id", "followed"} - set(df.columns)
        if missing:
            raise RepositoryError(
                f"Missing columns: {', '.join(sorted(missing))}", str(path)
            )

        observations = []
        for i, row in enumerate(df.iter_rows(named=True), start=2):
            try:
                observations.append(ComplianceObservation(
                    trade_id=(row["trade_id"] or "").strip(),
                    rule_text=(row.get("rule_text") or "").strip(),
                    followed=parse_followed(row["followed"]),
                    rule_id=(row.get("rule_id") or "").strip() or None,
                ))
            except ValueError as e:
                raise RepositoryError(f"Invalid observation at row {i}: {e}", str(path))

        self._cache = observations
        return self._cache

    def get_by_trade(self, trade_id: str) -> list[ComplianceObservation]:
        return [o for o in self.get_all() if o.trade_id == trade_id]

    def clear_cache(self) -> None:
        """Clear cached data."""
        self._cache = None
