"""
Retail Dataset Layer

Flat file dataset (one file per base table) with Polars I/O.

Modules:
    dataset_store: Path management and table file discovery
    polars_io: Atomic writes, safe reads
"""

from retail_sql.db.dataset_store import (
    TABLES,
    FORMATS,
    get_table_path,
    find_table_file,
    find_dataset,
    ensure_directory,
    list_tables,
)

from retail_sql.db.polars_io import (
    read_table_file,
    write_parquet_atomic,
    write_csv_atomic,
    write_file,
)

__all__ = [
    'TABLES',
    'FORMATS',
    'get_table_path',
    'find_table_file',
    'find_dataset',
    'ensure_directory',
    'list_tables',
    'read_table_file',
    'write_parquet_atomic',
    'write_csv_atomic',
    'write_file',
]
