"""
Retail SQL Orchestrator

CANONICAL RULE: Orchestrators are PURE.

This main orchestrator:
  - Creates the schema and loads the dataset
  - Runs all SQL stages in order (schema, views, indexes)
  - Runs the analytical queries by name
  - Exports results to parquet/csv

NO computation. NO inline analytical SQL. NO business logic.
All logic lives in the SQL files.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import duckdb
import pandas as pd

from retail_sql.db.dataset_store import find_dataset
from .stages import (
    SchemaStage,
    LoadStage,
    ViewsStage,
    IndexStage,
    CustomersByCityQuery,
    CategorySalesQuery,
    OrdersInPeriodQuery,
    CustomersWithoutOrdersQuery,
    AboveAveragePriceQuery,
    AboveAverageSpendersQuery,
    CustomerLifetimeValueQuery,
    ProductParetoQuery,
)

logger = logging.getLogger(__name__)


# Stage execution order
STAGES = [
    ('schema', SchemaStage),
    ('views', ViewsStage),
    ('indexes', IndexStage),
]

# Analytical queries, in report order
QUERIES = [
    ('customers_by_city', CustomersByCityQuery),
    ('category_sales', CategorySalesQuery),
    ('orders_in_period', OrdersInPeriodQuery),
    ('customers_without_orders', CustomersWithoutOrdersQuery),
    ('above_average_products', AboveAveragePriceQuery),
    ('above_average_spenders', AboveAverageSpendersQuery),
    ('customer_lifetime_value', CustomerLifetimeValueQuery),
    ('product_pareto', ProductParetoQuery),
]

EXPORT_FORMATS = {
    'parquet': "(FORMAT PARQUET)",
    'csv': "(FORMAT CSV, HEADER)",
}


class SQLOrchestrator:
    """
    Main SQL pipeline orchestrator.

    PURE PLUMBING ONLY:
      - create_schema()  : Create base tables
      - load_dataset()   : Load table files into database
      - run_stage()      : Execute a single stage
      - run_all()        : Execute all stages in order
      - run_query()      : Execute a named query with parameters
      - query()          : Query any view by name
      - export()         : Write query/view results to file

    NO computation. NO inline SQL. NO business logic.
    """

    def __init__(self, db_path: str = ':memory:', read_only: bool = False):
        """
        Initialize orchestrator.

        Args:
            db_path: DuckDB database path (':memory:' for in-memory)
            read_only: Open an existing database file read-only
        """
        self.db_path = str(db_path)
        if self.db_path != ':memory:':
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = duckdb.connect(self.db_path, read_only=read_only)
        self._stages: Dict[str, Any] = {}
        self._queries: Dict[str, Any] = {}
        self._output_dir: Optional[Path] = None
        self._executed: List[str] = []

        for name, stage_class in STAGES:
            self._stages[name] = stage_class(self.conn)
        self._loader = LoadStage(self.conn)

        for name, query_class in QUERIES:
            self._queries[name] = query_class(self.conn)

        logger.debug("Connected to DuckDB at %s", self.db_path)

    # ═══════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════

    def close(self) -> None:
        """Close the DuckDB connection."""
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ═══════════════════════════════════════════════════════════════════════
    # LOAD: Import data (no transformation)
    # ═══════════════════════════════════════════════════════════════════════

    def create_schema(self) -> None:
        """Create the base tables if they don't exist."""
        self.run_stage('schema')

    def load_table(self, table: str, path: Union[str, Path]) -> int:
        """Load one CSV/Parquet file into a base table. Returns rows inserted."""
        return self._loader.load_table(table, path)

    def load_frame(self, table: str, frame: pd.DataFrame) -> int:
        """Load a pandas DataFrame into a base table. Returns rows inserted."""
        return self._loader.load_frame(table, frame)

    def load_frames(self, frames: Dict[str, pd.DataFrame]) -> Dict[str, int]:
        """Load several DataFrames keyed by table name."""
        return {table: self.load_frame(table, frame) for table, frame in frames.items()}

    def load_dataset(self, data_dir: Union[str, Path], replace: bool = False) -> Dict[str, int]:
        """
        Load every base table file found in data_dir.

        PURE: Just locates files and inserts them. No transformation.

        Args:
            data_dir: Directory holding <table>.parquet / <table>.csv files
            replace: Empty each table before loading it

        Returns:
            Dict mapping table name to rows inserted
        """
        files = find_dataset(data_dir)
        if replace:
            for table in files:
                self._loader.truncate(table)
        return {table: self.load_table(table, path) for table, path in files.items()}

    def get_row_counts(self) -> Dict[str, int]:
        """Row counts for every base table."""
        return self._loader.get_row_counts()

    # ═══════════════════════════════════════════════════════════════════════
    # RUN: Execute stages (no logic, just sequence)
    # ═══════════════════════════════════════════════════════════════════════

    def run_stage(self, stage_name: str, rebuild: bool = False) -> None:
        """
        Run a single stage.

        PURE: Just loads and executes SQL file.

        Args:
            stage_name: One of the stage names (schema, views, indexes)
            rebuild: Drop the stage's objects first (views, indexes)
        """
        if stage_name not in self._stages:
            raise ValueError(f"Unknown stage: {stage_name}")
        stage = self._stages[stage_name]
        if rebuild and stage_name != 'schema':
            stage.drop()
        logger.info("Running stage %s (%s)", stage_name, stage.SQL_FILE)
        stage.run()
        if stage_name not in self._executed:
            self._executed.append(stage_name)

    def run_all(self, stop_after: Optional[str] = None, rebuild: bool = False) -> List[str]:
        """
        Run all stages in order.

        PURE: Just sequences stage execution. No logic.

        Args:
            stop_after: Optional stage name to stop after
            rebuild: Drop and recreate views/indexes that already exist

        Returns:
            List of stages executed
        """
        executed = []
        for name, _ in STAGES:
            self.run_stage(name, rebuild=rebuild)
            executed.append(name)
            if name == stop_after:
                break
        return executed

    # ═══════════════════════════════════════════════════════════════════════
    # QUERY: Get data from queries and views (no inline SQL)
    # ═══════════════════════════════════════════════════════════════════════

    def list_queries(self) -> List[str]:
        """Names of all analytical queries."""
        return [name for name, _ in QUERIES]

    def get_query(self, query_name: str):
        """Get a query orchestrator by name."""
        if query_name not in self._queries:
            raise ValueError(
                f"Unknown query: {query_name}. Available: {self.list_queries()}"
            )
        return self._queries[query_name]

    def run_query(self, query_name: str, **params) -> pd.DataFrame:
        """
        Run a named query.

        PURE: Just binds parameters and executes the SQL file.

        Args:
            query_name: One of list_queries()
            **params: Overrides for the query's default parameters

        Returns:
            DataFrame
        """
        return self.get_query(query_name).fetch(**params)

    def run_all_queries(
        self,
        params_by_query: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> Dict[str, pd.DataFrame]:
        """Run every query. Returns dict of query name to DataFrame."""
        params_by_query = params_by_query or {}
        return {
            name: self.run_query(name, **params_by_query.get(name, {}))
            for name in self.list_queries()
        }

    def query(self, view_name: str) -> pd.DataFrame:
        """
        Query a view by name.

        PURE: Just executes SELECT * FROM view_name.
        """
        return self.conn.execute(f"SELECT * FROM {view_name}").fetchdf()

    def get_stage(self, stage_name: str):
        """Get a stage orchestrator for direct access."""
        return self._stages.get(stage_name)

    def get_monthly_sales(self) -> pd.DataFrame:
        """Rows of the monthly_sales view."""
        return self._stages['views'].query('monthly_sales')

    # ═══════════════════════════════════════════════════════════════════════
    # EXPORT: Write to parquet/csv (no transformation)
    # ═══════════════════════════════════════════════════════════════════════

    def set_output_dir(self, path: Union[str, Path]) -> None:
        """Set output directory for exports."""
        self._output_dir = Path(path)
        self._output_dir.mkdir(parents=True, exist_ok=True)

    def export(
        self,
        name: str,
        filename: Optional[str] = None,
        fmt: str = 'parquet',
        **params,
    ) -> Path:
        """
        Export a query result or view to a file.

        PURE: Queries are written from their DuckDB relation, views via COPY.
        Column types are the engine's (DATE stays DATE, DECIMAL stays DECIMAL).

        Args:
            name: Query name (see list_queries()) or view name
            filename: Output filename (default: {name}.{fmt})
            fmt: 'parquet' or 'csv'
            **params: Query parameter overrides

        Returns:
            Path to exported file
        """
        if self._output_dir is None:
            raise RuntimeError("Output directory not set. Call set_output_dir() first.")
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unknown export format: {fmt}. Expected one of {sorted(EXPORT_FORMATS)}")

        output_path = self._output_dir / (filename or f"{name}.{fmt}")
        target = str(output_path).replace("'", "''")

        if name in self._queries:
            relation = self.get_query(name).relation(**params)
            if fmt == 'parquet':
                relation.write_parquet(str(output_path))
            else:
                relation.write_csv(str(output_path), header=True)
        else:
            self.conn.execute(f"COPY (SELECT * FROM {name}) TO '{target}' {EXPORT_FORMATS[fmt]}")

        logger.info("Exported %s -> %s", name, output_path)
        return output_path

    def export_all(
        self,
        fmt: str = 'parquet',
        params_by_query: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> Dict[str, Path]:
        """
        Export every query plus the monthly_sales view.

        PURE: Just sequences exports. No logic.

        Returns:
            Dict mapping output name to path
        """
        params_by_query = params_by_query or {}
        names = self.list_queries() + self._stages['views'].get_views()

        paths = {}
        for name in names:
            try:
                paths[name] = self.export(name, fmt=fmt, **params_by_query.get(name, {}))
            except duckdb.Error as e:
                logger.warning("Could not export %s: %s", name, e)

        return paths

    def write_manifest(self) -> Path:
        """
        Write manifest.json with run metadata.

        PURE: Just records metadata. No logic.
        """
        if self._output_dir is None:
            raise RuntimeError("Output directory not set.")

        manifest = {
            'generated_at': datetime.now().isoformat(),
            'database': self.db_path,
            'stages_executed': list(self._executed),
            'tables': self.get_row_counts(),
            'files': {}
        }

        for f in sorted(self._output_dir.glob('*.parquet')) + sorted(self._output_dir.glob('*.csv')):
            source = str(f).replace("'", "''")
            reader = 'read_parquet' if f.suffix == '.parquet' else 'read_csv_auto'
            row_count = self.conn.execute(f"SELECT COUNT(*) FROM {reader}('{source}')").fetchone()[0]
            manifest['files'][f.name] = {
                'rows': row_count,
                'path': str(f)
            }

        manifest_path = self._output_dir / 'manifest.json'
        manifest_path.write_text(json.dumps(manifest, indent=2))
        return manifest_path

    # ═══════════════════════════════════════════════════════════════════════
    # VALIDATION
    # ═══════════════════════════════════════════════════════════════════════

    def validate_stage(self, stage_name: str) -> bool:
        """Check if a stage's objects all exist."""
        if stage_name not in self._stages:
            raise ValueError(f"Unknown stage: {stage_name}")
        return self._stages[stage_name].validate()

    def validate_all(self) -> Dict[str, bool]:
        """Validate all stages and queries."""
        results = {name: stage.validate() for name, stage in self._stages.items()}
        results.update({name: q.validate() for name, q in self._queries.items()})
        return results

    # ═══════════════════════════════════════════════════════════════════════
    # PIPELINE: Full run sequence
    # ═══════════════════════════════════════════════════════════════════════

    def run_pipeline(
        self,
        data_dir: Union[str, Path],
        output_dir: Union[str, Path],
        params_by_query: Optional[Dict[str, Dict[str, Any]]] = None,
        fmt: str = 'parquet',
    ) -> Dict[str, Any]:
        """
        Run full pipeline.

        PURE: Just sequences operations. No logic.

        Args:
            data_dir: Directory holding <table>.parquet / <table>.csv files
            output_dir: Directory for outputs
            params_by_query: Optional query parameter overrides
            fmt: Export format

        Returns:
            Dict with run results
        """
        # 1. Schema
        self.create_schema()

        # 2. Load dataset (full reload)
        loaded = self.load_dataset(data_dir, replace=True)
        logger.info("Loaded %s rows", f"{sum(loaded.values()):,}")

        # 3. Views and indexes
        for name, _ in STAGES[1:]:
            try:
                self.run_stage(name, rebuild=True)
            except duckdb.Error as e:
                logger.error("Stage %s FAILED: %s", name, e)
                raise

        # 4. Export
        self.set_output_dir(output_dir)
        paths = self.export_all(fmt=fmt, params_by_query=params_by_query)
        manifest_path = self.write_manifest()

        logger.info("Exported %d files to %s", len(paths), output_dir)

        return {
            'status': 'complete',
            'input_rows': loaded,
            'output_dir': str(output_dir),
            'files': [str(p) for p in paths.values()],
            'manifest': str(manifest_path),
        }
