"""
Index Stage Orchestrator

PURE: Loads 02_indexes.sql, creates lookup indexes.
NO computation. NO inline SQL beyond catalog checks.
"""

from typing import List

from .base import StageOrchestrator


class IndexStage(StageOrchestrator):
    """Indexes for email lookups, customer/date scans and category filters."""

    SQL_FILE = '02_indexes.sql'

    INDEXES = [
        'idx_customer_email',
        'idx_order_customer_date',
        'idx_product_category',
    ]

    DEPENDS_ON = ['customers', 'orders', 'products']

    def existing_indexes(self) -> List[str]:
        """Return the managed indexes present in the catalog."""
        rows = self.conn.execute("SELECT index_name FROM duckdb_indexes()").fetchall()
        return sorted(r[0] for r in rows if r[0] in self.INDEXES)

    def validate(self) -> bool:
        """True if all three indexes exist."""
        return set(self.existing_indexes()) == set(self.INDEXES)

    def drop(self) -> None:
        for index in self.INDEXES:
            self.conn.execute(f"DROP INDEX IF EXISTS {index}")
        self._loaded = False
