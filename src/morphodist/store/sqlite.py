"""SQLite repository for the per-plate backing store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from morphodist.errors import InputMissingError
from morphodist.store.interfaces import TableRepository, _quote

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class SQLiteTableRepository(TableRepository):
    """
    SQLite-based table repository.

    Holds one connection for the lifetime of a run; the store is treated as
    exclusive to this process, so intermediate tables are simply dropped and
    recreated.
    """

    def __init__(self, db_path: Union[Path, str], create: bool = False):
        """
        Initialize repository.

        Parameters
        ----------
        db_path : Path or str
            Path to SQLite database file, or ":memory:"
        create : bool
            Allow creating a database file that does not exist yet
        """
        self.db_path = db_path if str(db_path) == MEMORY else Path(db_path)
        self.create = create
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.open()
        return self._conn

    def open(self) -> None:
        """Open the database, refusing to create a missing file unless allowed."""
        if self._conn is not None:
            return
        if self.db_path != MEMORY:
            if not self.db_path.exists():
                if not self.create:
                    raise InputMissingError(
                        f"Backing store not found: {self.db_path}", missing=[str(self.db_path)]
                    )
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        logger.info(f"Opened backing store {self.db_path}")

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug(f"Closed backing store {self.db_path}")

    def has_table(self, name: str) -> bool:
        cursor = self.connection.execute(
            "SELECT 1 FROM sqlite_master WHERE type IN ('table', 'view') AND name = ?",
            (name,),
        )
        return cursor.fetchone() is not None

    def list_columns(self, table: str) -> List[str]:
        self.require_tables([table])
        cursor = self.connection.execute(f"PRAGMA table_info({_quote(table)})")
        return [row[1] for row in cursor.fetchall()]

    def query(self, sql: str, params: Optional[Sequence] = None) -> pd.DataFrame:
        logger.debug(f"SQL: {sql}")
        return pd.read_sql_query(sql, self.connection, params=params)

    def replace_table(self, name: str, df: pd.DataFrame) -> None:
        df.to_sql(name, self.connection, if_exists="replace", index=False)
        self.connection.commit()
        logger.info(f"Wrote table '{name}' ({len(df)} rows)")

    def drop_table(self, name: str) -> None:
        self.connection.execute(f"DROP TABLE IF EXISTS {_quote(name)}")
        self.connection.commit()
