"""
Retail Dataset Storage Layout

Path management for the flat file dataset that feeds the base tables.

Directory Structure:
    data/
      customers.parquet      (or customers.csv)
      products.parquet
      orders.parquet
      order_items.parquet

Naming Convention:
    - One file per base table
    - Filename = table name + format extension
    - Parquet is preferred when both formats are present

Usage:
    get_table_path('data', 'orders')            # -> data/orders.parquet
    get_table_path('data', 'orders', 'csv')     # -> data/orders.csv
    find_table_file('data', 'orders')           # existing file or None
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

# Load order: referenced tables before referencing ones
TABLES = [
    "customers",
    "products",
    "orders",
    "order_items",
]

# Preference order when several formats exist
FORMATS = ["parquet", "csv"]


def get_table_path(
    data_dir: Union[str, Path],
    table: str,
    fmt: str = "parquet",
) -> Path:
    """
    Get the file path for a base table.

    Args:
        data_dir: Dataset directory
        table: Table name (one of TABLES)
        fmt: File format ('parquet' or 'csv')

    Returns:
        Path to {data_dir}/{table}.{fmt}
    """
    if table not in TABLES:
        raise ValueError(f"Unknown table: {table}. Expected one of {TABLES}")
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format: {fmt}. Expected one of {FORMATS}")
    return Path(data_dir) / f"{table}.{fmt}"


def find_table_file(data_dir: Union[str, Path], table: str) -> Optional[Path]:
    """Return the first existing file for a table, or None."""
    for fmt in FORMATS:
        path = get_table_path(data_dir, table, fmt)
        if path.exists():
            return path
    return None


def find_dataset(data_dir: Union[str, Path]) -> Dict[str, Path]:
    """
    Locate every base table file in a dataset directory.

    Raises:
        FileNotFoundError: If the directory or any table file is missing
    """
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Dataset directory not found: {data_dir}")

    found = {}
    missing = []
    for table in TABLES:
        path = find_table_file(data_dir, table)
        if path is None:
            missing.append(table)
        else:
            found[table] = path

    if missing:
        raise FileNotFoundError(
            f"Missing table files in {data_dir}: {missing} "
            f"(expected <table>.parquet or <table>.csv)"
        )
    return found


def ensure_directory(data_dir: Union[str, Path]) -> Path:
    """Create the dataset directory if needed."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def list_tables() -> List[str]:
    """List base table names in load order."""
    return TABLES.copy()
