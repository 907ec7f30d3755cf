"""Base Repository: Abstract interface for data access.

Repository Pattern provides:
- Abstraction over data sources (files, exchange exports)
- Caching for repeated reads
- Consistent error handling
- Easy testing via tmp directories
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TypeVar, Generic

import polars as pl

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Abstract base class for repositories.

    All repositories should:
    1. Provide a get_all() method
    2. Handle caching internally
    3. Raise RepositoryError on failures
    """

    @abstractmethod
    def get_all(self) -> T:
        """Retrieve all data from the repository.

        Returns:
            The complete dataset

        Raises:
            RepositoryError: If data cannot be loaded
        """
        pass

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear any cached data."""
        pass


class RepositoryError(Exception):
    """Exception raised when repository operations fail."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{message}" + (f" (path: {path})" if path else ""))


def read_string_csv(path: Path, label: str) -> pl.DataFrame:
    """Read a CSV with every column as text, normalizing header names.

    Headers are lowercased and stripped so user exports with "Symbol" or
    " PnL" still match. Rows that are entirely empty are dropped.

    Raises:
        RepositoryError: If the file is missing or cannot be parsed
    """
    if not path.exists():
        raise RepositoryError(f"{label} not found", str(path))

    try:
        df = pl.read_csv(path, infer_schema_length=0)
    except Exception as e:
        raise RepositoryError(f"Failed to read {label}: {e}", str(path))

    return normalize_frame(df)


def normalize_frame(df: pl.DataFrame) -> pl.DataFrame:
    """Lowercase/strip headers and drop all-null rows."""
    df = df.rename({c: c.strip().lower() for c in df.columns})
    if df.width == 0:
        return df
    return df.filter(~pl.all_horizontal(pl.all().is_null()))
