"""
Synthetic Retail Dataset
========================

Generates a deterministic customers / products / orders / order_items
dataset for demos and tests.

Properties:
- Same seed, same frames
- Order totals equal the sum of their lines (exact to the cent)
- A share of customers never orders (anti-join has rows)
- All order dates fall inside [start, end]

Usage:
    frames = generate_dataset(n_customers=200, seed=7)
    write_dataset(frames, 'data/demo', fmt='parquet')
"""

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Union

import numpy as np
import polars as pl

from retail_sql.db.dataset_store import TABLES, ensure_directory, get_table_path
from retail_sql.db.polars_io import write_file

logger = logging.getLogger(__name__)


FIRST_NAMES = [
    'Ava', 'Ben', 'Chloe', 'Daniel', 'Emma', 'Felix', 'Grace', 'Hugo',
    'Isla', 'Jack', 'Kara', 'Liam', 'Maya', 'Noah', 'Olive', 'Paul',
]
LAST_NAMES = [
    'Adams', 'Brown', 'Clark', 'Davis', 'Evans', 'Fisher', 'Garcia',
    'Hughes', 'Iverson', 'Jones', 'King', 'Lopez', 'Miller', 'Nguyen',
]
CITIES = ['New York', 'Chicago', 'Los Angeles', 'Houston', 'Seattle', 'Boston']
CITY_WEIGHTS = [0.30, 0.20, 0.20, 0.12, 0.10, 0.08]
CATEGORIES = ['Electronics', 'Books', 'Home', 'Toys', 'Sports', 'Beauty']
STATUSES = ['delivered', 'shipped', 'processing', 'cancelled']
STATUS_WEIGHTS = [0.70, 0.15, 0.10, 0.05]

MAX_LINES_PER_ORDER = 4
MAX_QUANTITY = 5


def generate_dataset(
    n_customers: int = 100,
    n_products: int = 25,
    n_orders: int = 600,
    seed: int = 42,
    start: date = date(2022, 1, 1),
    end: date = date(2024, 12, 31),
    inactive_share: float = 0.1,
) -> Dict[str, pl.DataFrame]:
    """
    Generate the four base tables.

    Args:
        n_customers: Number of customers
        n_products: Number of products
        n_orders: Number of orders
        seed: RNG seed
        start: First possible order date
        end: Last possible order date
        inactive_share: Fraction of customers that never order

    Returns:
        Dict mapping table name to Polars DataFrame
    """
    if n_customers < 1 or n_products < 1 or n_orders < 0:
        raise ValueError("Need at least one customer and one product, and a non-negative order count")
    if end < start:
        raise ValueError(f"end ({end}) is before start ({start})")
    if not 0.0 <= inactive_share < 1.0:
        raise ValueError(f"inactive_share must be in [0, 1), got {inactive_share}")

    rng = np.random.default_rng(seed)
    span_days = (end - start).days

    # ─── customers ───
    customer_ids = np.arange(1, n_customers + 1)
    first = rng.choice(FIRST_NAMES, size=n_customers)
    last = rng.choice(LAST_NAMES, size=n_customers)
    cities = rng.choice(CITIES, size=n_customers, p=CITY_WEIGHTS)
    join_offsets = rng.integers(0, span_days + 1, size=n_customers)

    customers = pl.DataFrame(
        {
            'customer_id': customer_ids.tolist(),
            'first_name': first.tolist(),
            'last_name': last.tolist(),
            'email': [f"{f.lower()}.{l.lower()}{i}@example.com" for f, l, i in zip(first, last, customer_ids)],
            'city': cities.tolist(),
            'join_date': [start + timedelta(days=int(d)) for d in join_offsets],
        },
        schema={
            'customer_id': pl.Int32,
            'first_name': pl.Utf8,
            'last_name': pl.Utf8,
            'email': pl.Utf8,
            'city': pl.Utf8,
            'join_date': pl.Date,
        },
    )

    # ─── products (prices in integer cents) ───
    product_ids = np.arange(1, n_products + 1)
    categories = rng.choice(CATEGORIES, size=n_products)
    price_cents = np.clip(np.round(rng.lognormal(8.0, 0.9, size=n_products)), 99, 500_000).astype(np.int64)

    products = pl.DataFrame(
        {
            'product_id': product_ids.tolist(),
            'product_name': [f"{c} Item {i:03d}" for c, i in zip(categories, product_ids)],
            'category': categories.tolist(),
            'price': (price_cents / 100.0).tolist(),
        },
        schema={
            'product_id': pl.Int32,
            'product_name': pl.Utf8,
            'category': pl.Utf8,
            'price': pl.Float64,
        },
    )

    # ─── orders + lines ───
    n_active = max(1, int(np.floor(n_customers * (1.0 - inactive_share))))
    active = rng.permutation(customer_ids)[:n_active]

    order_rows = {'order_id': [], 'customer_id': [], 'order_date': [], 'total_amount': [], 'status': []}
    item_rows = {'order_id': [], 'product_id': [], 'quantity': [], 'unit_price': []}

    max_lines = min(MAX_LINES_PER_ORDER, n_products)
    for order_id in range(1, n_orders + 1):
        n_lines = int(rng.integers(1, max_lines + 1))
        picked = rng.choice(n_products, size=n_lines, replace=False)
        quantities = rng.integers(1, MAX_QUANTITY + 1, size=n_lines)

        total_cents = 0
        for idx, qty in zip(picked, quantities):
            cents = int(price_cents[idx])
            total_cents += int(qty) * cents
            item_rows['order_id'].append(order_id)
            item_rows['product_id'].append(int(product_ids[idx]))
            item_rows['quantity'].append(int(qty))
            item_rows['unit_price'].append(cents / 100.0)

        order_rows['order_id'].append(order_id)
        order_rows['customer_id'].append(int(rng.choice(active)))
        order_rows['order_date'].append(start + timedelta(days=int(rng.integers(0, span_days + 1))))
        order_rows['total_amount'].append(total_cents / 100.0)
        order_rows['status'].append(str(rng.choice(STATUSES, p=STATUS_WEIGHTS)))

    orders = pl.DataFrame(
        order_rows,
        schema={
            'order_id': pl.Int32,
            'customer_id': pl.Int32,
            'order_date': pl.Date,
            'total_amount': pl.Float64,
            'status': pl.Utf8,
        },
    )
    order_items = pl.DataFrame(
        item_rows,
        schema={
            'order_id': pl.Int32,
            'product_id': pl.Int32,
            'quantity': pl.Int32,
            'unit_price': pl.Float64,
        },
    )

    logger.debug(
        "Generated %d customers, %d products, %d orders, %d lines (seed=%d)",
        len(customers), len(products), len(orders), len(order_items), seed,
    )

    return {
        'customers': customers,
        'products': products,
        'orders': orders,
        'order_items': order_items,
    }


def write_dataset(
    frames: Dict[str, pl.DataFrame],
    data_dir: Union[str, Path],
    fmt: str = 'parquet',
) -> Dict[str, Path]:
    """
    Write generated frames as <table>.<fmt> files.

    Returns:
        Dict mapping table name to written path
    """
    data_dir = ensure_directory(data_dir)
    paths = {}
    for table in TABLES:
        if table not in frames:
            raise ValueError(f"Missing frame for table: {table}")
        path = get_table_path(data_dir, table, fmt)
        rows = write_file(frames[table], path)
        logger.info("Wrote %d rows to %s", rows, path)
        paths[table] = path
    return paths
