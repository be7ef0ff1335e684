"""
Retail SQL Stage Orchestrators

CANONICAL RULE: Orchestrators are PURE.

Allowed:
  - load_sql()     : Load SQL from file
  - get_views()    : Return list of views created
  - validate()     : Check views exist
  - fetch()        : Bind parameters, execute, return DataFrame

NOT Allowed:
  - Inline analytical SQL strings
  - Mathematical operations
  - Data transformations
  - Business logic
"""

from .base import StageOrchestrator, QueryOrchestrator
from .schema import SchemaStage
from .load import LoadStage
from .views import ViewsStage
from .indexes import IndexStage
from .customers import (
    CustomersByCityQuery,
    CustomersWithoutOrdersQuery,
    AboveAverageSpendersQuery,
    CustomerLifetimeValueQuery,
)
from .sales import CategorySalesQuery, OrdersInPeriodQuery
from .products import AboveAveragePriceQuery, ProductParetoQuery

__all__ = [
    'StageOrchestrator',
    'QueryOrchestrator',
    'SchemaStage',
    'LoadStage',
    'ViewsStage',
    'IndexStage',
    'CustomersByCityQuery',
    'CustomersWithoutOrdersQuery',
    'AboveAverageSpendersQuery',
    'CustomerLifetimeValueQuery',
    'CategorySalesQuery',
    'OrdersInPeriodQuery',
    'AboveAveragePriceQuery',
    'ProductParetoQuery',
]
