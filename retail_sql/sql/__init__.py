"""
Retail SQL Pipeline

SQL-first retail analytics on DuckDB.

CANONICAL RULE: Orchestrators are PURE.
All logic lives in SQL files, not in Python.
"""

from .orchestrator import SQLOrchestrator, STAGES, QUERIES

__all__ = [
    'SQLOrchestrator',
    'STAGES',
    'QUERIES',
]
