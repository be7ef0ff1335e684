"""
Load Stage Orchestrator

PURE: Inserts external files or DataFrames into the base tables.
NO computation. NO transformation beyond DuckDB's column casts.
"""

import logging
from pathlib import Path
from typing import Dict, Union

import pandas as pd

from .base import StageOrchestrator
from .schema import SchemaStage

logger = logging.getLogger(__name__)

# File extension -> DuckDB table function
READERS = {
    '.parquet': 'read_parquet',
    '.csv': 'read_csv_auto',
}


class LoadStage(StageOrchestrator):
    """Load customers, products, orders and order lines."""

    TABLES = SchemaStage.TABLES

    DEPENDS_ON = ['customers', 'products', 'orders', 'order_items']

    def _check_table(self, table: str) -> None:
        if table not in self.TABLES:
            raise ValueError(f"Unknown table: {table}. Expected one of {self.TABLES}")

    def run(self) -> None:
        """Nothing to execute: loading is driven by load_table/load_frame."""
        self._loaded = True

    def load_table(self, table: str, path: Union[str, Path]) -> int:
        """
        Insert a CSV or Parquet file into a base table.

        Columns are matched by name; DuckDB casts to the table types.

        Args:
            table: Target table name
            path: Path to a .csv or .parquet file

        Returns:
            Number of rows inserted

        Raises:
            ValueError: Unknown table or unsupported file type
            FileNotFoundError: If path does not exist
        """
        self._check_table(table)
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")

        reader = READERS.get(path.suffix.lower())
        if reader is None:
            raise ValueError(
                f"Unsupported file type: {path.suffix} (expected one of {sorted(READERS)})"
            )

        before = self.get_row_count(table)
        source = str(path).replace("'", "''")
        self.conn.execute(f"INSERT INTO {table} BY NAME SELECT * FROM {reader}('{source}')")
        inserted = self.get_row_count(table) - before
        logger.info("Loaded %d rows into %s from %s", inserted, table, path.name)
        return inserted

    def load_frame(self, table: str, frame: pd.DataFrame) -> int:
        """
        Insert a pandas DataFrame into a base table.

        Returns:
            Number of rows inserted
        """
        self._check_table(table)
        self.conn.register('_incoming_frame', frame)
        try:
            self.conn.execute(f"INSERT INTO {table} BY NAME SELECT * FROM _incoming_frame")
        finally:
            self.conn.unregister('_incoming_frame')
        logger.info("Loaded %d rows into %s from DataFrame", len(frame), table)
        return len(frame)

    def truncate(self, table: str) -> None:
        """Remove all rows from a base table."""
        self._check_table(table)
        self.conn.execute(f"DELETE FROM {table}")

    def get_row_count(self, table: str) -> int:
        """Return number of rows in a base table."""
        self._check_table(table)
        return self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    def get_row_counts(self) -> Dict[str, int]:
        """Return row counts for every base table."""
        return {table: self.get_row_count(table) for table in self.TABLES}
