"""
Tests for the analytical queries against the hand-built dataset.

Expected values are worked out by hand from conftest.py.
"""

from datetime import date

import duckdb
import pandas as pd
import pytest


# ─────────────────────────────────────────────────────────────────────
# Customers
# ─────────────────────────────────────────────────────────────────────

class TestCustomersByCity:

    def test_default_city_sorted_by_last_then_first(self, orchestrator):
        df = orchestrator.run_query('customers_by_city')

        assert df['customer_id'].tolist() == [2, 3, 1, 6]
        assert (df['city'] == 'New York').all()
        assert list(df.columns) == ['customer_id', 'first_name', 'last_name', 'email', 'city']

    def test_other_city(self, orchestrator):
        df = orchestrator.run_query('customers_by_city', city='Chicago')
        assert df['customer_id'].tolist() == [4]

    def test_exact_match_only(self, orchestrator):
        df = orchestrator.run_query('customers_by_city', city='new york')
        assert len(df) == 0


class TestCustomersWithoutOrders:

    def test_anti_join(self, orchestrator):
        df = orchestrator.run_query('customers_without_orders')
        assert sorted(df['customer_id'].tolist()) == [5, 6]
        assert list(df.columns) == ['customer_id', 'first_name', 'last_name', 'email']

    def test_everyone_without_orders_when_orders_empty(self, empty_orchestrator, retail_frames):
        empty_orchestrator.load_frame('customers', retail_frames['customers'])
        df = empty_orchestrator.run_query('customers_without_orders')
        assert sorted(df['customer_id'].tolist()) == [1, 2, 3, 4, 5, 6]


class TestAboveAverageSpenders:

    def test_sum_compared_with_average_order(self, orchestrator):
        # Average of orders 100-105 is 2230 / 6; order 106 has no customer
        df = orchestrator.run_query('above_average_spenders')

        assert df['customer_id'].tolist() == [1, 2]
        assert df['total_spent'].tolist() == pytest.approx([1260.0, 845.0])

    def test_threshold_ignores_orders_without_customer(self, orchestrator):
        # A large anonymous order would lift the threshold above customer 2 if counted
        orchestrator.load_frame('orders', pd.DataFrame({
            'order_id': [200],
            'customer_id': pd.array([None], dtype='Int64'),
            'order_date': ['2023-08-01'],
            'total_amount': [100000.00],
            'status': ['delivered'],
        }))
        df = orchestrator.run_query('above_average_spenders')
        assert df['customer_id'].tolist() == [1, 2]


class TestCustomerLifetimeValue:

    def test_ranking_and_metrics(self, orchestrator):
        df = orchestrator.run_query('customer_lifetime_value')

        assert df['customer_id'].tolist() == [1, 2, 3, 4]
        assert df['total_orders'].tolist() == [2, 2, 1, 1]
        assert df['total_spent'].tolist() == pytest.approx([1260.0, 845.0, 90.0, 35.0])
        assert df['avg_order_value'].astype(float).tolist() == pytest.approx([630.0, 422.5, 90.0, 35.0])
        assert df['customer_duration_days'].tolist() == [54, 213, 0, 0]

    def test_customers_without_orders_excluded(self, orchestrator):
        df = orchestrator.run_query('customer_lifetime_value')
        assert not set(df['customer_id']) & {5, 6}

    def test_top_n(self, orchestrator):
        df = orchestrator.run_query('customer_lifetime_value', top_n=2)
        assert df['customer_id'].tolist() == [1, 2]

    def test_join_date_carried(self, orchestrator):
        df = orchestrator.run_query('customer_lifetime_value', top_n=1)
        assert pd.Timestamp(df['join_date'].iloc[0]) == pd.Timestamp('2022-06-01')


# ─────────────────────────────────────────────────────────────────────
# Sales
# ─────────────────────────────────────────────────────────────────────

class TestCategorySales:

    def test_totals_per_category(self, orchestrator):
        df = orchestrator.run_query('category_sales').set_index('category')

        assert df.loc['Electronics', 'order_count'] == 2
        assert df.loc['Electronics', 'total_units_sold'] == 2
        assert float(df.loc['Electronics', 'total_revenue']) == pytest.approx(2000.0)

        assert df.loc['Books', 'order_count'] == 4
        assert df.loc['Books', 'total_units_sold'] == 5
        assert float(df.loc['Books', 'total_revenue']) == pytest.approx(115.0)

        assert df.loc['Home', 'order_count'] == 2
        assert df.loc['Home', 'total_units_sold'] == 3
        assert float(df.loc['Home', 'total_revenue']) == pytest.approx(135.0)

    def test_sorted_by_revenue_desc(self, orchestrator):
        df = orchestrator.run_query('category_sales')
        assert df['category'].tolist() == ['Electronics', 'Home', 'Books']


class TestOrdersInPeriod:

    def test_default_year_is_inclusive(self, orchestrator):
        df = orchestrator.run_query('orders_in_period')

        # 103 (2022-12-31) and 104 (2024-01-01) are outside; 106 has no customer
        assert df['order_id'].tolist() == [105, 102, 101, 100]

    def test_columns_include_customer_details(self, orchestrator):
        df = orchestrator.run_query('orders_in_period')
        assert list(df.columns) == [
            'order_id', 'order_date', 'first_name', 'last_name', 'email', 'total_amount', 'status',
        ]
        assert df.iloc[0]['email'] == 'bob@example.com'

    def test_custom_range_with_dates(self, orchestrator):
        df = orchestrator.run_query(
            'orders_in_period', start_date=date(2022, 12, 31), end_date=date(2023, 1, 31),
        )
        assert df['order_id'].tolist() == [100, 103]

    def test_custom_range_with_strings(self, orchestrator):
        df = orchestrator.run_query('orders_in_period', start_date='2024-01-01', end_date='2024-12-31')
        assert df['order_id'].tolist() == [104]


# ─────────────────────────────────────────────────────────────────────
# Products
# ─────────────────────────────────────────────────────────────────────

class TestAboveAverageProducts:

    def test_strictly_above_mean(self, orchestrator):
        # Mean price is 2100 / 5 = 420
        df = orchestrator.run_query('above_average_products')

        assert df['product_id'].tolist() == [10, 11]
        assert df['price'].astype(float).tolist() == pytest.approx([1200.0, 800.0])

    def test_price_equal_to_mean_excluded(self, empty_orchestrator):
        empty_orchestrator.load_frame('products', pd.DataFrame({
            'product_id': [1, 2, 3],
            'product_name': ['a', 'b', 'c'],
            'category': ['x', 'x', 'x'],
            'price': [10.00, 20.00, 30.00],
        }))
        df = empty_orchestrator.run_query('above_average_products')
        assert df['product_id'].tolist() == [3]


class TestProductPareto:

    def test_ranks_and_cumulative_share(self, orchestrator):
        df = orchestrator.run_query('product_pareto')

        assert df['product_id'].tolist() == [10, 11, 14, 12, 13]
        assert df['revenue_rank'].tolist() == [1, 2, 3, 4, 5]
        assert df['units_sold'].tolist() == [1, 1, 3, 4, 1]
        assert df['cumulative_revenue_percentage'].tolist() == pytest.approx(
            [1200 / 2250, 2000 / 2250, 2135 / 2250, 2215 / 2250, 1.0]
        )

    def test_ties_share_rank_and_cumulative(self, empty_orchestrator):
        empty_orchestrator.load_frames({
            'products': pd.DataFrame({
                'product_id': [1, 2, 3],
                'product_name': ['a', 'b', 'c'],
                'category': ['x', 'x', 'y'],
                'price': [10.00, 10.00, 5.00],
            }),
            'order_items': pd.DataFrame({
                'order_id': [1, 2, 3],
                'product_id': [1, 2, 3],
                'quantity': [1, 1, 1],
                'unit_price': [10.00, 10.00, 5.00],
            }),
        })
        df = empty_orchestrator.run_query('product_pareto')

        assert df['revenue_rank'].tolist() == [1, 1, 3]
        assert df['cumulative_revenue_percentage'].tolist() == pytest.approx([0.8, 0.8, 1.0])


# ─────────────────────────────────────────────────────────────────────
# Parameters
# ─────────────────────────────────────────────────────────────────────

class TestQueryParameters:

    def test_unknown_parameter_rejected(self, orchestrator):
        with pytest.raises(ValueError, match='Unknown parameter'):
            orchestrator.run_query('category_sales', city='Boston')

    def test_unknown_query_rejected(self, orchestrator):
        with pytest.raises(ValueError, match='Unknown query'):
            orchestrator.run_query('top_secret')

    def test_defaults_not_mutated_by_overrides(self, orchestrator):
        query = orchestrator.get_query('customers_by_city')
        orchestrator.run_query('customers_by_city', city='Boston')
        assert query.PARAMS == {'city': 'New York'}

    def test_engine_errors_propagate(self, orchestrator):
        with pytest.raises(duckdb.Error):
            orchestrator.run_query('customer_lifetime_value', top_n='many')
