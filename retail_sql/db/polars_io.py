"""
Retail Polars I/O Utilities

Atomic writes and safe reads for the dataset files.

Key Functions:
    read_table_file(path) - Read parquet/csv, empty DataFrame if missing
    write_parquet_atomic(df, path) - Write to temp file, rename (atomic)
    write_csv_atomic(df, path) - Same for CSV
    write_file(df, path) - Dispatch on extension
"""

from pathlib import Path
from typing import List, Optional, Union

import polars as pl


def read_table_file(
    path: Union[str, Path],
    columns: Optional[List[str]] = None,
) -> pl.DataFrame:
    """
    Read a parquet or CSV file, returning empty DataFrame if it doesn't exist.

    Args:
        path: Path to .parquet or .csv file
        columns: Optional list of columns to read

    Returns:
        Polars DataFrame (empty if file doesn't exist)
    """
    path = Path(path)
    if not path.exists():
        return pl.DataFrame()

    if path.suffix == ".csv":
        return pl.read_csv(path, columns=columns, try_parse_dates=True)
    return pl.read_parquet(path, columns=columns)


def write_parquet_atomic(
    df: pl.DataFrame,
    path: Union[str, Path],
    compression: str = "zstd",
) -> int:
    """
    Atomically write a DataFrame to a parquet file.

    Writes to a temporary file first, then renames to target path.
    The target file is never left in a partial state.

    Returns:
        Number of rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = path.with_suffix(".parquet.tmp")

    try:
        df.write_parquet(temp_path, compression=compression)
        temp_path.replace(path)
        return len(df)
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


def write_csv_atomic(df: pl.DataFrame, path: Union[str, Path]) -> int:
    """Atomically write a DataFrame to a CSV file (header row included)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = path.with_suffix(".csv.tmp")

    try:
        df.write_csv(temp_path)
        temp_path.replace(path)
        return len(df)
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


def write_file(df: pl.DataFrame, path: Union[str, Path]) -> int:
    """Write parquet or CSV depending on the file extension."""
    path = Path(path)
    if path.suffix == ".csv":
        return write_csv_atomic(df, path)
    if path.suffix == ".parquet":
        return write_parquet_atomic(df, path)
    raise ValueError(f"Unsupported file type: {path.suffix}")
