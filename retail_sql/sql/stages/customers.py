"""
Customer Query Orchestrators

PURE: Each class binds one SQL file in sql/queries/.
NO computation. NO inline SQL.
"""

from .base import QueryOrchestrator


class CustomersByCityQuery(QueryOrchestrator):
    """Customers in one city, ordered by last and first name."""

    NAME = 'customers_by_city'
    PARAMS = {'city': 'New York'}
    DEPENDS_ON = ['customers']


class CustomersWithoutOrdersQuery(QueryOrchestrator):
    """Customers with no orders at all (anti-join)."""

    NAME = 'customers_without_orders'
    DEPENDS_ON = ['customers', 'orders']


class AboveAverageSpendersQuery(QueryOrchestrator):
    """
    Customers whose total spend exceeds the average order amount.

    The threshold is the AVG of individual orders, not the average
    per-customer total. Kept as written.
    """

    NAME = 'above_average_spenders'
    DEPENDS_ON = ['customers', 'orders']


class CustomerLifetimeValueQuery(QueryOrchestrator):
    """Top customers by lifetime spend, with order count and duration."""

    NAME = 'customer_lifetime_value'
    PARAMS = {'top_n': 20}
    DEPENDS_ON = ['customers', 'orders']
