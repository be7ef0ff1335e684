"""
Retail SQL - Retail Analytics on DuckDB
=======================================

SQL does the analysis. Python loads, sequences and exports.

Architecture:
    - sql/sql/:          SQL files (schema, views, indexes, queries/)
    - sql/stages/:       Thin orchestrators, one per SQL file
    - sql/orchestrator:  SQLOrchestrator (load, run, query, export)
    - config/:           YAML profiles
    - db/:               Dataset layout and Polars I/O
    - synthetic.py:      Synthetic retail dataset
    - validation.py:     Invariant checks over query results
    - cli.py:            Command line interface

Usage:
    # CLI
    python -m retail_sql generate
    python -m retail_sql query category_sales

    # Python
    from retail_sql.sql import SQLOrchestrator
    with SQLOrchestrator() as orch:
        orch.create_schema()
        orch.load_dataset('data/raw')
        orch.run_all()
        df = orch.run_query('product_pareto')
"""

__version__ = "1.0.0"

# Lazy imports to keep `import retail_sql` cheap
__all__ = ['sql', 'config', 'db', 'synthetic', 'validation', '__version__']


def __getattr__(name):
    """Lazy import of submodules."""
    if name == 'sql':
        from . import sql
        return sql
    elif name == 'config':
        from . import config
        return config
    elif name == 'db':
        from . import db
        return db
    elif name == 'synthetic':
        from . import synthetic
        return synthetic
    elif name == 'validation':
        from . import validation
        return validation
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
