"""
Base Stage Orchestrator

CANONICAL RULE: Orchestrators are PURE.

This base class provides:
  - load_sql()     : Load SQL from file
  - run()          : Execute the SQL (DDL for tables, views or indexes)
  - get_views()    : Return list of views created
  - validate()     : Check the stage's objects exist

QueryOrchestrator adds:
  - fetch()        : Execute a parameterised SELECT, return DataFrame
  - relation()     : The same SELECT as a DuckDB relation, engine types kept

NO computation. NO inline SQL. NO business logic.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import duckdb
import pandas as pd

logger = logging.getLogger(__name__)


class StageOrchestrator:
    """
    Base class for pure stage orchestrators.

    Each stage:
    1. Has a SQL file (sql/{SQL_FILE})
    2. Creates database objects: tables, views or indexes
    3. Has no computation logic

    VIEWS lists the views a stage creates. Stages that create tables or
    indexes leave it empty and override validate() with a catalog check.
    """

    # Override in subclass
    SQL_FILE: str = None
    VIEWS: List[str] = []
    DEPENDS_ON: List[str] = []

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        """
        Initialize with database connection.

        Args:
            conn: DuckDB connection (shared across all stages)
        """
        self.conn = conn
        self._sql_dir = Path(__file__).parent.parent / 'sql'
        self._loaded = False

    @property
    def sql_path(self) -> Path:
        """Path to this stage's SQL file."""
        if self.SQL_FILE is None:
            raise NotImplementedError(f"{self.__class__.__name__} must define SQL_FILE")
        return self._sql_dir / self.SQL_FILE

    def load_sql(self) -> str:
        """Load SQL from file. No modification."""
        return self.sql_path.read_text()

    def run(self) -> None:
        """
        Execute this stage's SQL.

        PURE: Just loads and executes. No logic.
        """
        sql = self.load_sql()
        logger.debug("Executing %s", self.sql_path.name)
        self.conn.execute(sql)
        self._loaded = True

    def get_views(self) -> List[str]:
        """Return list of views this stage creates (empty for table/index stages)."""
        return self.VIEWS.copy()

    def get_dependencies(self) -> List[str]:
        """Return the base tables this stage reads."""
        return self.DEPENDS_ON.copy()

    def validate(self) -> bool:
        """
        True if the stage's objects exist.

        Default: every entry of VIEWS is queryable. SchemaStage and
        IndexStage check the catalog instead.
        """
        missing = [name for name in self.VIEWS if not self._queryable(name)]
        if missing:
            logger.debug("%s missing %s", self.__class__.__name__, missing)
        return not missing

    def _queryable(self, name: str) -> bool:
        try:
            self.conn.execute(f"SELECT 1 FROM {name} LIMIT 0")
        except duckdb.Error:
            return False
        return True

    def query(self, view_name: str) -> pd.DataFrame:
        """
        Read every row of one of this stage's views.

        Raises:
            ValueError: If view_name is not in VIEWS
        """
        if view_name not in self.VIEWS:
            raise ValueError(f"View {view_name} not in {self.__class__.__name__}.VIEWS")
        return self.conn.execute(f"SELECT * FROM {view_name}").fetchdf()

    def __repr__(self):
        status = "loaded" if self._loaded else "not loaded"
        return f"<{self.__class__.__name__} {self.SQL_FILE} [{status}]>"


class QueryOrchestrator(StageOrchestrator):
    """
    A stage whose SQL file holds one SELECT.

    Parameters are DuckDB named parameters ($name) with defaults in PARAMS.
    Every parameter referenced by the SQL must have a default.
    """

    NAME: str = None
    PARAMS: Dict[str, Any] = {}

    @property
    def sql_path(self) -> Path:
        """Path to this query's SQL file (sql/queries/{NAME}.sql)."""
        if self.NAME is None:
            raise NotImplementedError(f"{self.__class__.__name__} must define NAME")
        return self._sql_dir / 'queries' / f"{self.NAME}.sql"

    def resolve_params(self, **overrides) -> Dict[str, Any]:
        """
        Merge overrides over the default parameters.

        Raises:
            ValueError: If an override names an unknown parameter
        """
        unknown = sorted(set(overrides) - set(self.PARAMS))
        if unknown:
            raise ValueError(
                f"Unknown parameter(s) for {self.NAME}: {unknown}. "
                f"Accepted: {sorted(self.PARAMS)}"
            )
        params = dict(self.PARAMS)
        params.update(overrides)
        return params

    def _execute(self, **overrides) -> duckdb.DuckDBPyConnection:
        sql = self.load_sql()
        params = self.resolve_params(**overrides)
        logger.debug("Running query %s with %s", self.NAME, params)
        if params:
            return self.conn.execute(sql, params)
        return self.conn.execute(sql)

    def fetch(self, **overrides) -> pd.DataFrame:
        """
        Execute the query and return the result set.

        PURE: Just binds parameters and executes. Logic is in SQL.
        """
        df = self._execute(**overrides).fetchdf()
        self._loaded = True
        return df

    def relation(self, **overrides) -> duckdb.DuckDBPyRelation:
        """
        The query as a DuckDB relation with parameters bound.

        Column types stay DuckDB's own (DATE, DECIMAL) for writing
        straight to parquet/csv.
        """
        params = self.resolve_params(**overrides)
        return self.conn.sql(self.load_sql(), params=params or None)

    def run(self) -> None:
        """Execute with default parameters, discarding the result."""
        self._execute()
        self._loaded = True

    def validate(self) -> bool:
        """True if the query executes against the current schema."""
        try:
            self._execute()
        except duckdb.Error:
            return False
        return True

    def describe(self) -> str:
        """First line of the class docstring."""
        doc = self.__class__.__doc__ or ''
        return doc.strip().split('\n')[0]

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.NAME} params={sorted(self.PARAMS)}>"
