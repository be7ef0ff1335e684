#!/usr/bin/env python3
"""
Retail Sales Report: summary of the analytical queries.

Shows:
- Table volumes and overall revenue
- Revenue by category
- Monthly sales
- Top customers by lifetime value
- Pareto (ABC) split of product revenue
- Customers without orders

Usage:
    python -m reports.sales_report --data-dir data/raw
    python -m reports.sales_report --profile demo --output report.md
"""

import argparse
import logging
import sys

import pandas as pd

from retail_sql.config import get_profile
from retail_sql.sql import SQLOrchestrator
from reports.report_utils import ReportBuilder, format_number, format_percent

logger = logging.getLogger(__name__)

# Cumulative revenue share boundaries for ABC classes
PARETO_A = 0.80
PARETO_B = 0.95

MAX_ROWS = 10


def _rows(df: pd.DataFrame, limit: int = MAX_ROWS) -> int:
    return min(len(df), limit)


def pareto_classes(pareto: pd.DataFrame) -> pd.Series:
    """Count of products per ABC class by cumulative revenue share."""
    share = pareto['cumulative_revenue_percentage'].astype(float)
    classes = pd.cut(
        share,
        bins=[-float('inf'), PARETO_A, PARETO_B, float('inf')],
        labels=['A', 'B', 'C'],
    )
    return classes.value_counts().reindex(['A', 'B', 'C'], fill_value=0)


def generate_sales_report(orchestrator, params_by_query=None, profile_name=None) -> ReportBuilder:
    """Generate the sales report from a loaded orchestrator."""
    params_by_query = params_by_query or {}
    results = orchestrator.run_all_queries(params_by_query)
    counts = orchestrator.get_row_counts()

    report = ReportBuilder("Retail Sales Report", profile=profile_name)

    # ==========================================================================
    # Key Metrics
    # ==========================================================================
    category_sales = results['category_sales']
    total_revenue = float(category_sales['total_revenue'].sum()) if len(category_sales) else 0.0

    report.add_metric("Customers", counts['customers'])
    report.add_metric("Products", counts['products'])
    report.add_metric("Orders", counts['orders'])
    report.add_metric("Order Lines", counts['order_items'])
    report.add_metric("Line Revenue", total_revenue)
    report.add_metric("Customers Without Orders", len(results['customers_without_orders']))

    # ==========================================================================
    # Revenue by Category
    # ==========================================================================
    rows = []
    for row in category_sales.itertuples(index=False):
        rows.append([
            str(row.category),
            format_number(row.order_count, 0),
            format_number(row.total_units_sold, 0),
            format_number(row.total_revenue, 2),
        ])
    report.add_table(
        "Revenue by Category",
        ["Category", "Order Lines", "Units", "Revenue"],
        rows,
        alignments=['l', 'r', 'r', 'r'],
    )

    # ==========================================================================
    # Monthly Sales
    # ==========================================================================
    if orchestrator.validate_stage('views'):
        monthly = orchestrator.get_monthly_sales()
        rows = [
            [
                pd.Timestamp(row.month).strftime('%Y-%m'),
                format_number(row.order_count, 0),
                format_number(row.total_sales, 2),
                format_number(row.avg_order_value, 2),
            ]
            for row in monthly.itertuples(index=False)
        ]
        report.add_table(
            "Monthly Sales",
            ["Month", "Orders", "Sales", "Avg Order"],
            rows,
            alignments=['l', 'r', 'r', 'r'],
        )
    else:
        report.add_section("Monthly Sales", "monthly_sales view not created (run the views stage)")

    # ==========================================================================
    # Customer Lifetime Value
    # ==========================================================================
    clv = results['customer_lifetime_value']
    rows = []
    for row in clv.head(MAX_ROWS).itertuples(index=False):
        rows.append([
            f"{row.first_name} {row.last_name}",
            format_number(row.total_orders, 0),
            format_number(row.total_spent, 2),
            format_number(row.avg_order_value, 2),
            format_number(row.customer_duration_days, 0),
        ])
    if len(clv) > MAX_ROWS:
        rows.append(["...", f"({len(clv) - MAX_ROWS} more)", "", "", ""])
    report.add_table(
        "Top Customers by Lifetime Value",
        ["Customer", "Orders", "Spent", "Avg Order", "Active Days"],
        rows,
        alignments=['l', 'r', 'r', 'r', 'r'],
    )

    # ==========================================================================
    # Pareto
    # ==========================================================================
    pareto = results['product_pareto']
    if len(pareto):
        classes = pareto_classes(pareto)
        report.add_section(
            "Product Revenue Concentration",
            f"A (first {format_percent(PARETO_A, 0)} of revenue): {classes['A']} products\n"
            f"B (next {format_percent(PARETO_B - PARETO_A, 0)}): {classes['B']} products\n"
            f"C (remainder): {classes['C']} products"
        )
        rows = [
            [
                str(row.revenue_rank),
                str(row.product_name),
                str(row.category),
                format_number(row.revenue, 2),
                format_percent(row.cumulative_revenue_percentage),
            ]
            for row in pareto.head(MAX_ROWS).itertuples(index=False)
        ]
        report.add_table(
            "Top Products by Revenue",
            ["Rank", "Product", "Category", "Revenue", "Cumulative"],
            rows,
            alignments=['r', 'l', 'l', 'r', 'r'],
        )
    else:
        report.add_section("Product Revenue Concentration", "No order lines loaded")

    # ==========================================================================
    # Customers Without Orders
    # ==========================================================================
    inactive = results['customers_without_orders']
    if len(inactive):
        listed = [
            f"- {row.first_name} {row.last_name} <{row.email}>"
            for row in inactive.head(MAX_ROWS).itertuples(index=False)
        ]
        if len(inactive) > MAX_ROWS:
            listed.append(f"- ... ({len(inactive) - MAX_ROWS} more)")
        report.add_section("Customers Without Orders", "\n".join(listed))
    else:
        report.add_section("Customers Without Orders", "✓ Every customer has ordered")

    return report


def main():
    parser = argparse.ArgumentParser(description='Retail Sales Report')
    parser.add_argument('--profile', type=str, default=None, help='Profile name')
    parser.add_argument('--data-dir', type=str, default=None, help='Dataset directory (overrides profile)')
    parser.add_argument('--output', type=str, default=None, help='Output file (md or json)')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s | %(levelname)s | %(message)s')

    profile = get_profile(args.profile)
    data_dir = args.data_dir or profile.data_dir
    params = profile.queries

    with SQLOrchestrator(':memory:') as orchestrator:
        orchestrator.create_schema()
        try:
            orchestrator.load_dataset(data_dir)
        except FileNotFoundError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            sys.exit(1)
        orchestrator.run_all()
        report = generate_sales_report(orchestrator, params, profile_name=profile.name)

    if args.output:
        if args.output.endswith('.json'):
            report.save_json(args.output)
        else:
            report.save_markdown(args.output)
        print(f"Report saved to: {args.output}")
    else:
        print(report.to_text())


if __name__ == "__main__":
    main()
