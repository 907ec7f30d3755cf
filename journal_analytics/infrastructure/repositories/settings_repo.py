"""Settings Repository: Access to user risk limits.

Reads risk_settings.json:

    {"daily_loss_limit": 500, "weekly_loss_limit": 1500,
     "portfolio_value": 25000, "max_concentration_pct": 20,
     "max_risk_pct": 1}

Every key is optional; an absent key (or absent file) disables that check.
"""

import json

from journal_analytics.infrastructure.repositories.base import Repository, RepositoryError
from journal_analytics.infrastructure.config import (
    DataPaths,
    DEFAULT_PATHS,
    DEFAULT_LIMITS,
    RiskLimits,
)


class RiskSettingsRepository(Repository[RiskLimits]):
    """Repository for risk limits.

    Example:
        >>> repo = RiskSettingsRepository()
        >>> limits = repo.get_all()
        >>> limits.daily_loss_limit
    """

    def __init__(self, paths: DataPaths = DEFAULT_PATHS):
        self._paths = paths
        self._cache: RiskLimits | None = None

    def get_all(self) -> RiskLimits:
        """Load risk limits, defaults when no settings file exists.

        Raises:
            RepositoryError: If the file exists but is not valid settings
        """
        if self._cache is not None:
            return self._cache

        path = self._paths.risk_settings
        if not path.exists():
            self._cache = DEFAULT_LIMITS
            return self._cache

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RepositoryError(f"Failed to read risk settings: {e}", str(path))

        if not isinstance(data, dict):
            raise RepositoryError("Risk settings must be a JSON object", str(path))

        try:
            self._cache = RiskLimits.from_dict(data)
        except (TypeError, ValueError) as e:
            raise RepositoryError(f"Invalid risk settings: {e}", str(path))
        return self._cache

    def save(self, limits: RiskLimits) -> None:
        """Write limits to the settings file."""
        path = self._paths.risk_settings
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(limits.to_dict(), f, indent=2)
        except OSError as e:
            raise RepositoryError(f"Failed to write risk settings: {e}", str(path))
        self._cache = limits

    def clear_cache(self) -> None:
        """Clear cached data."""
        self._cache = None
