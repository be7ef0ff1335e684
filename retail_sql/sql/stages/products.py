"""
Product Query Orchestrators

PURE: Each class binds one SQL file in sql/queries/.
NO computation. NO inline SQL.
"""

from .base import QueryOrchestrator


class AboveAveragePriceQuery(QueryOrchestrator):
    """Products priced strictly above the average product price."""

    NAME = 'above_average_products'
    DEPENDS_ON = ['products']


class ProductParetoQuery(QueryOrchestrator):
    """Revenue rank and cumulative revenue share per product (Pareto)."""

    NAME = 'product_pareto'
    DEPENDS_ON = ['order_items', 'products']
