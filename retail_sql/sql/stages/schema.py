"""
Schema Stage Orchestrator

PURE: Loads 00_schema.sql, creates the base retail tables.
NO computation. NO inline SQL beyond catalog checks.
"""

from typing import List

from .base import StageOrchestrator


class SchemaStage(StageOrchestrator):
    """Base tables: customers, products, orders, order_items."""

    SQL_FILE = '00_schema.sql'

    TABLES = [
        'customers',
        'products',
        'orders',
        'order_items',
    ]

    DEPENDS_ON = []  # First stage, no dependencies

    def get_tables(self) -> List[str]:
        """Return list of tables this stage creates."""
        return self.TABLES.copy()

    def existing_tables(self) -> List[str]:
        """Return the base tables currently present in the database."""
        rows = self.conn.execute(
            "SELECT table_name FROM duckdb_tables() WHERE table_name IN "
            "('customers', 'products', 'orders', 'order_items')"
        ).fetchall()
        return sorted(r[0] for r in rows)

    def validate(self) -> bool:
        """True if every base table exists."""
        return set(self.existing_tables()) == set(self.TABLES)

    def drop(self) -> None:
        """Drop all base tables (children first)."""
        for table in reversed(self.TABLES):
            self.conn.execute(f"DROP TABLE IF EXISTS {table}")
        self._loaded = False
