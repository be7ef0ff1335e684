"""
Views Stage Orchestrator

PURE: Loads 01_views.sql, creates the monthly sales view.
NO computation. NO inline SQL.
"""

from .base import StageOrchestrator


class ViewsStage(StageOrchestrator):
    """Monthly order count, sales total and average order value."""

    SQL_FILE = '01_views.sql'

    VIEWS = [
        'monthly_sales',
    ]

    DEPENDS_ON = ['orders']

    def drop(self) -> None:
        """Drop the views so the stage can be re-run."""
        for view in self.VIEWS:
            self.conn.execute(f"DROP VIEW IF EXISTS {view}")
        self._loaded = False

    def view_definition(self, view_name: str = 'monthly_sales') -> str:
        """Return the stored SQL of a view, or empty string if absent."""
        row = self.conn.execute(
            "SELECT sql FROM duckdb_views() WHERE view_name = ?", [view_name]
        ).fetchone()
        return row[0] if row else ''
