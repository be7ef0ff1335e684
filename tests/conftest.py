"""
Shared fixtures: a small hand-built retail dataset with known answers.

Customers 5 and 6 never order. Order 106 has no customer.
Order 103 (2022-12-31) and 104 (2024-01-01) sit just outside 2023.
"""

import pandas as pd
import pytest

from retail_sql.config import clear_config_cache
from retail_sql.sql import SQLOrchestrator


def _customers() -> pd.DataFrame:
    return pd.DataFrame({
        'customer_id': [1, 2, 3, 4, 5, 6],
        'first_name': ['Alice', 'Bob', 'Carol', 'Dan', 'Eve', 'Frank'],
        'last_name': ['Smith', 'Adams', 'Adams', 'Brown', 'Stone', 'Zed'],
        'email': [
            'alice@example.com', 'bob@example.com', 'carol@example.com',
            'dan@example.com', 'eve@example.com', 'frank@example.com',
        ],
        'city': ['New York', 'New York', 'New York', 'Chicago', 'Boston', 'New York'],
        'join_date': ['2022-06-01', '2022-07-15', '2022-08-01', '2023-02-01', '2023-03-01', '2023-04-01'],
    })


def _products() -> pd.DataFrame:
    return pd.DataFrame({
        'product_id': [10, 11, 12, 13, 14],
        'product_name': ['Laptop', 'Phone', 'Novel', 'Cookbook', 'Lamp'],
        'category': ['Electronics', 'Electronics', 'Books', 'Books', 'Home'],
        'price': [1200.00, 800.00, 20.00, 35.00, 45.00],
    })


def _orders() -> pd.DataFrame:
    return pd.DataFrame({
        'order_id': [100, 101, 102, 103, 104, 105, 106],
        'customer_id': pd.array([1, 1, 2, 3, 4, 2, None], dtype='Int64'),
        'order_date': [
            '2023-01-15', '2023-03-10', '2023-06-01', '2022-12-31',
            '2024-01-01', '2023-12-31', '2023-07-04',
        ],
        'total_amount': [1220.00, 40.00, 800.00, 90.00, 35.00, 45.00, 20.00],
        'status': ['delivered', 'delivered', 'shipped', 'delivered', 'processing', 'delivered', 'delivered'],
    })


def _order_items() -> pd.DataFrame:
    return pd.DataFrame({
        'order_id': [100, 100, 101, 102, 103, 104, 105, 106],
        'product_id': [10, 12, 12, 11, 14, 13, 14, 12],
        'quantity': [1, 1, 2, 1, 2, 1, 1, 1],
        'unit_price': [1200.00, 20.00, 20.00, 800.00, 45.00, 35.00, 45.00, 20.00],
    })


@pytest.fixture
def retail_frames():
    """Fresh copies of the four base tables."""
    return {
        'customers': _customers(),
        'products': _products(),
        'orders': _orders(),
        'order_items': _order_items(),
    }


@pytest.fixture
def empty_orchestrator():
    """In-memory orchestrator with the schema but no rows."""
    orchestrator = SQLOrchestrator(':memory:')
    orchestrator.create_schema()
    yield orchestrator
    orchestrator.close()


@pytest.fixture
def orchestrator(empty_orchestrator, retail_frames):
    """In-memory orchestrator loaded with the fixture dataset, views and indexes built."""
    empty_orchestrator.load_frames(retail_frames)
    empty_orchestrator.run_all()
    return empty_orchestrator


@pytest.fixture
def dataset_dir(tmp_path, retail_frames):
    """The fixture dataset written as CSV files."""
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    for table, frame in retail_frames.items():
        frame.to_csv(data_dir / f"{table}.csv", index=False)
    return data_dir


@pytest.fixture(autouse=True)
def _isolated_profiles(monkeypatch):
    """No profile or database overrides leak in from the environment."""
    monkeypatch.delenv('RETAIL_SQL_PROFILE', raising=False)
    monkeypatch.delenv('RETAIL_SQL_DB', raising=False)
    clear_config_cache()
    yield
    clear_config_cache()
