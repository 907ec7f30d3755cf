"""Configuration: Centralized paths and settings.

This module provides:
- DataPaths: File paths for all data sources
- EngineConfig: Parameters for reconstruction and analytics
- RiskLimits: User-configured risk limits (all optional)

Directory Structure:
    data/
    ├── fills.json               # Raw exchange fills (import input)
    ├── trades.csv               # Trade journal (import output)
    ├── compliance.csv           # Rule compliance observations
    └── reports/                 # Exported performance reports
    risk_settings.json           # RiskLimits
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DataPaths:
    """File paths for data sources.

    Attributes:
        root: Project root directory
    """

    root: Path = Path(".")

    # --- Directories ---

    @property
    def data_dir(self) -> Path:
        """Main data directory."""
        return self.root / "data"

    @property
    def reports_dir(self) -> Path:
        """Exported reports."""
        return self.data_dir / "reports"

    # --- Files ---

    @property
    def fills_file(self) -> Path:
        """Raw exchange fills (JSON array)."""
        return self.data_dir / "fills.json"

    @property
    def trades_file(self) -> Path:
        """Trade journal."""
        return self.data_dir / "trades.csv"

    @property
    def compliance_file(self) -> Path:
        """Rule compliance observations."""
        return self.data_dir / "compliance.csv"

    @property
    def risk_settings(self) -> Path:
        """Risk limits (JSON)."""
        return self.root / "risk_settings.json"

    # --- Helper Methods ---

    def validate(self) -> list[str]:
        """Check which required paths are missing.

        Returns:
            List of missing paths (empty if all exist)
        """
        missing = []

        if not self.data_dir.exists():
            missing.append(str(self.data_dir))
        if not self.trades_file.exists():
            missing.append(str(self.trades_file))

        return missing

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.reports_dir.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for reconstruction and analytics.

    Attributes:
        max_fills: Largest fill batch accepted for one reconstruction
        size_epsilon: Residual size treated as a flat position
        annualization_days: Sharpe annualization (trades per year)
        compliance_threshold: Per-trade rate counted as compliant
        stop_tolerance: Loss / planned risk ratio still counted as a kept stop
        output_formats: Report formats ("csv", "parquet", "xlsx")
    """

    max_fills: int = 10_000
    size_epsilon: float = 1e-6
    annualization_days: int = 252
    compliance_threshold: float = 0.8
    stop_tolerance: float = 1.1
    output_formats: tuple[str, ...] = ("csv", "parquet")


@dataclass(frozen=True)
class RiskLimits:
    """User risk settings. None disables the corresponding check.

    Attributes:
        daily_loss_limit: Max realized loss per calendar day
        weekly_loss_limit: Max realized loss per Monday-starting week
        portfolio_value: Account size used for concentration and sizing
        max_concentration_pct: Max open exposure per symbol (% of portfolio)
        max_risk_pct: Max risk per trade (% of portfolio)
    """

    daily_loss_limit: float | None = None
    weekly_loss_limit: float | None = None
    portfolio_value: float | None = None
    max_concentration_pct: float | None = None
    max_risk_pct: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "RiskLimits":
        """Build from a settings mapping, ignoring unknown keys."""
        values = {}
        for name in cls.__dataclass_fields__:
            raw = data.get(name)
            values[name] = float(raw) if raw is not None else None
        return cls(**values)

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


# Default instances
DEFAULT_PATHS = DataPaths()
DEFAULT_CONFIG = EngineConfig()
DEFAULT_LIMITS = RiskLimits()
