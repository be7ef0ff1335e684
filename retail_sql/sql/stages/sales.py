"""
Sales Query Orchestrators

PURE: Each class binds one SQL file in sql/queries/.
NO computation. NO inline SQL.
"""

from datetime import date

from .base import QueryOrchestrator


class CategorySalesQuery(QueryOrchestrator):
    """Order lines, units and revenue per product category."""

    NAME = 'category_sales'
    DEPENDS_ON = ['order_items', 'products']


class OrdersInPeriodQuery(QueryOrchestrator):
    """Orders with customer details in a closed date range, newest first."""

    NAME = 'orders_in_period'
    PARAMS = {
        'start_date': date(2023, 1, 1),
        'end_date': date(2023, 12, 31),
    }
    DEPENDS_ON = ['orders', 'customers']
