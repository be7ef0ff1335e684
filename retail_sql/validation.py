"""
Retail Query Validation

Checks the analytical query results against properties that must hold
for any dataset. Every check returns (check_name, passed, message) tuples.

Usage:
    from retail_sql.validation import validate_database

    results = validate_database(orchestrator)
    failed = [r for r in results if not r[1]]
"""

import logging
import math
from typing import List, Tuple

import duckdb
import pandas as pd

logger = logging.getLogger(__name__)

CheckResult = Tuple[str, bool, str]

# Float tolerance for revenue sums and percentages
TOLERANCE = 1e-9


def _is_sorted(df: pd.DataFrame, columns: List[str], descending: bool = False) -> bool:
    """True if df is already sorted by columns."""
    if len(df) < 2:
        return True
    ordered = df.sort_values(columns, ascending=not descending, kind='mergesort')
    return ordered[columns].reset_index(drop=True).equals(df[columns].reset_index(drop=True))


def _category_key(category):
    return None if pd.isna(category) else category


def check_customers_by_city(df: pd.DataFrame, city: str) -> List[CheckResult]:
    """Every row is in city; rows are non-descending by (last_name, first_name)."""
    results = []

    wrong = df[df['city'] != city]
    if len(wrong) == 0:
        results.append((f"customers_by_city all in '{city}'", True, ""))
    else:
        results.append((f"customers_by_city all in '{city}'", False,
                        f"{len(wrong)} rows in other cities: {sorted(wrong['city'].unique())}"))

    if _is_sorted(df, ['last_name', 'first_name']):
        results.append(("customers_by_city sorted by name", True, ""))
    else:
        results.append(("customers_by_city sorted by name", False, "rows out of (last_name, first_name) order"))

    return results


def check_category_sales(df: pd.DataFrame, conn: duckdb.DuckDBPyConnection) -> List[CheckResult]:
    """Revenue per category matches the raw line sums; sorted by revenue desc."""
    results = []

    lines = conn.execute(
        "SELECT p.category, CAST(oi.quantity AS DOUBLE) * CAST(oi.unit_price AS DOUBLE) AS line_revenue "
        "FROM order_items oi JOIN products p ON oi.product_id = p.product_id"
    ).fetchdf()
    # NULL category is its own group, as in GROUP BY
    expected = {
        _category_key(category): value
        for category, value in lines.groupby('category', dropna=False)['line_revenue'].sum().items()
    }
    actual = {
        _category_key(category): float(value)
        for category, value in zip(df['category'], df['total_revenue'])
    }

    mismatched = []
    if set(expected) != set(actual):
        differ = sorted(str(c) for c in set(expected) ^ set(actual))
        mismatched.append(f"categories differ: {differ}")
    else:
        for category, value in expected.items():
            if not math.isclose(actual[category], value, rel_tol=TOLERANCE, abs_tol=0.005):
                mismatched.append(f"{category}: {actual[category]} != {value}")

    if mismatched:
        results.append(("category_sales revenue matches line sums", False, "; ".join(mismatched)))
    else:
        results.append(("category_sales revenue matches line sums", True, ""))

    if _is_sorted(df, ['total_revenue'], descending=True):
        results.append(("category_sales sorted by revenue desc", True, ""))
    else:
        results.append(("category_sales sorted by revenue desc", False, "total_revenue not descending"))

    return results


def check_customers_without_orders(df: pd.DataFrame, conn: duckdb.DuckDBPyConnection) -> List[CheckResult]:
    """Result is exactly the set of customers absent from orders."""
    all_ids = {r[0] for r in conn.execute("SELECT customer_id FROM customers").fetchall()}
    ordering = {
        r[0] for r in conn.execute(
            "SELECT DISTINCT customer_id FROM orders WHERE customer_id IS NOT NULL"
        ).fetchall()
    }
    expected = all_ids - ordering
    actual = set(df['customer_id'].tolist())

    if actual == expected and len(df) == len(actual):
        return [("customers_without_orders is set difference", True, "")]
    return [("customers_without_orders is set difference", False,
             f"missing={sorted(expected - actual)} extra={sorted(actual - expected)}")]


def check_above_average_products(df: pd.DataFrame, conn: duckdb.DuckDBPyConnection) -> List[CheckResult]:
    """Every returned price is strictly above the mean of all prices."""
    prices = conn.execute("SELECT CAST(price AS DOUBLE) AS price FROM products").fetchdf()['price']
    mean_price = prices.mean()

    not_above = df[df['price'].astype(float) <= mean_price]
    results = []
    if len(not_above) == 0:
        results.append(("above_average_products all above mean", True, ""))
    else:
        results.append(("above_average_products all above mean", False,
                        f"{len(not_above)} rows at or below mean {mean_price:.2f}"))

    expected_count = int((prices > mean_price).sum())
    if expected_count == len(df):
        results.append(("above_average_products complete", True, ""))
    else:
        results.append(("above_average_products complete", False,
                        f"expected {expected_count} rows, got {len(df)}"))
    return results


def check_product_pareto(df: pd.DataFrame) -> List[CheckResult]:
    """Cumulative share is non-decreasing in rank and ends at 1.0."""
    if len(df) == 0:
        return [
            ("product_pareto cumulative non-decreasing", True, "no rows"),
            ("product_pareto cumulative ends at 1.0", True, "no rows"),
        ]

    results = []
    ranked = df.sort_values('revenue_rank', kind='mergesort')
    cumulative = ranked['cumulative_revenue_percentage'].astype(float)

    if cumulative.diff().dropna().ge(-TOLERANCE).all():
        results.append(("product_pareto cumulative non-decreasing", True, ""))
    else:
        results.append(("product_pareto cumulative non-decreasing", False, "cumulative share decreases"))

    peak = cumulative.max()
    if math.isclose(peak, 1.0, abs_tol=TOLERANCE):
        results.append(("product_pareto cumulative ends at 1.0", True, ""))
    else:
        results.append(("product_pareto cumulative ends at 1.0", False, f"max is {peak!r}"))

    return results


def check_monthly_sales_roundtrip(orchestrator) -> List[CheckResult]:
    """Dropping and recreating monthly_sales reproduces schema and rows."""
    stage = orchestrator.get_stage('views')
    conn = orchestrator.conn

    def snapshot():
        schema = conn.execute("DESCRIBE monthly_sales").fetchall()
        rows = stage.query('monthly_sales').reset_index(drop=True)
        return schema, rows

    try:
        schema_before, rows_before = snapshot()
    except duckdb.Error as e:
        return [("monthly_sales round-trip", False, f"view not queryable: {e}")]

    definition = stage.view_definition('monthly_sales')
    stage.drop()
    try:
        stage.run()
        schema_after, rows_after = snapshot()
    except duckdb.Error as e:
        if not stage.validate():
            conn.execute(definition)
        return [("monthly_sales round-trip", False, f"recreate failed: {e}")]

    if schema_before != schema_after:
        return [("monthly_sales round-trip", False, "schema changed after recreate")]
    if not rows_before.equals(rows_after):
        return [("monthly_sales round-trip", False, "rows changed after recreate")]
    return [("monthly_sales round-trip", True, "")]


def check_referential_integrity(conn: duckdb.DuckDBPyConnection) -> List[CheckResult]:
    """Order lines reference existing products and orders."""
    results = []

    orphan_products = conn.execute(
        "SELECT COUNT(*) FROM order_items oi "
        "LEFT JOIN products p ON oi.product_id = p.product_id WHERE p.product_id IS NULL"
    ).fetchone()[0]
    results.append(("order_items reference products", orphan_products == 0,
                    f"{orphan_products} orphan lines" if orphan_products else ""))

    orphan_orders = conn.execute(
        "SELECT COUNT(*) FROM order_items oi "
        "LEFT JOIN orders o ON oi.order_id = o.order_id WHERE o.order_id IS NULL"
    ).fetchone()[0]
    results.append(("order_items reference orders", orphan_orders == 0,
                    f"{orphan_orders} orphan lines" if orphan_orders else ""))

    return results


def validate_database(orchestrator, params_by_query=None) -> List[CheckResult]:
    """
    Run every check against an orchestrator with schema, data and views.

    Args:
        orchestrator: SQLOrchestrator
        params_by_query: Optional query parameter overrides

    Returns:
        List of (check_name, passed, message)
    """
    params_by_query = params_by_query or {}
    conn = orchestrator.conn
    results: List[CheckResult] = []

    city_params = params_by_query.get('customers_by_city', {})
    city = city_params.get('city', orchestrator.get_query('customers_by_city').PARAMS['city'])

    results.extend(check_referential_integrity(conn))
    results.extend(check_customers_by_city(orchestrator.run_query('customers_by_city', **city_params), city))
    results.extend(check_category_sales(orchestrator.run_query('category_sales'), conn))
    results.extend(check_customers_without_orders(orchestrator.run_query('customers_without_orders'), conn))
    results.extend(check_above_average_products(orchestrator.run_query('above_average_products'), conn))
    results.extend(check_product_pareto(orchestrator.run_query('product_pareto')))
    results.extend(check_monthly_sales_roundtrip(orchestrator))

    failed = sum(1 for _, passed, _ in results if not passed)
    if failed:
        logger.warning("%d of %d checks failed", failed, len(results))
    else:
        logger.info("All %d checks passed", len(results))

    return results
