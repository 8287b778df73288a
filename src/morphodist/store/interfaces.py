"""Abstract repository interface for the relational backing store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from morphodist.errors import InputMissingError


class TableRepository(ABC):
    """Interface for table-level access to the backing store.

    Pipeline stages receive a repository instead of an ambient connection, so
    each stage reads its input tables and writes its output table through
    these methods only.
    """

    @abstractmethod
    def open(self) -> None:
        """Open the underlying connection."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the underlying connection."""
        pass

    @abstractmethod
    def has_table(self, name: str) -> bool:
        """Return True if a table with this name exists."""
        pass

    @abstractmethod
    def list_columns(self, table: str) -> List[str]:
        """Column names of a table, in stored order."""
        pass

    @abstractmethod
    def query(self, sql: str, params: Optional[Sequence] = None) -> pd.DataFrame:
        """Run a SELECT and return the result as a DataFrame."""
        pass

    @abstractmethod
    def replace_table(self, name: str, df: pd.DataFrame) -> None:
        """Drop any table with this name and recreate it from df."""
        pass

    @abstractmethod
    def drop_table(self, name: str) -> None:
        """Drop a table if it exists."""
        pass

    def read_table(self, name: str, columns: Optional[Iterable[str]] = None) -> pd.DataFrame:
        """Read a whole table, optionally restricted to some columns."""
        self.require_tables([name])
        if columns is None:
            select = "*"
        else:
            select = ", ".join(_quote(c) for c in columns)
        return self.query(f"SELECT {select} FROM {_quote(name)}")

    def require_tables(self, names: Iterable[str]) -> None:
        """
        Check that every named table exists.

        Raises
        ------
        InputMissingError
            Listing every missing table
        """
        missing = [n for n in names if not self.has_table(n)]
        if missing:
            raise InputMissingError(
                f"Required table(s) missing from backing store: {', '.join(missing)}",
                missing=missing,
            )

    def __enter__(self) -> "TableRepository":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _quote(identifier: str) -> str:
    """Quote an SQL identifier."""
    return '"' + str(identifier).replace('"', '""') + '"'
