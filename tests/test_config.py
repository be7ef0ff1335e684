"""
Tests for YAML profile loading.
"""

from datetime import date

import pytest

from retail_sql.config import (
    clear_config_cache,
    get_profile,
    get_query_params,
    list_available_profiles,
    load_profile,
    reload_profile,
)
from retail_sql.config.profile import coerce_param


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / 'shop.yaml').write_text(
        "profile: shop\n"
        "database: ':memory:'\n"
        "data_dir: somewhere\n"
        "export_format: csv\n"
        "queries:\n"
        "  orders_in_period:\n"
        "    start_date: '2022-02-01'\n"
        "    end_date: 2022-02-28\n"
        "  category_sales:\n"
        "retention_days: 30\n"
    )
    (tmp_path / '_draft.yaml').write_text("profile: draft\n")
    return tmp_path


class TestLoadProfile:

    def test_default_profile(self):
        profile = load_profile('default')

        assert profile.name == 'default'
        assert profile.export_format == 'parquet'
        assert profile.get_query_params('customers_by_city') == {'city': 'New York'}
        assert profile.get_query_params('orders_in_period') == {
            'start_date': date(2023, 1, 1),
            'end_date': date(2023, 12, 31),
        }
        assert profile.get_query_params('customer_lifetime_value') == {'top_n': 20}

    def test_demo_profile_extras(self):
        profile = load_profile('demo')
        assert profile.is_in_memory
        assert profile.extras['synthetic']['seed'] == 7

    def test_string_dates_coerced(self, config_dir):
        profile = load_profile('shop', config_dir)
        params = profile.get_query_params('orders_in_period')
        assert params['start_date'] == date(2022, 2, 1)
        assert params['end_date'] == date(2022, 2, 28)

    def test_empty_query_section(self, config_dir):
        profile = load_profile('shop', config_dir)
        assert profile.get_query_params('category_sales') == {}
        assert profile.get_query_params('product_pareto') == {}

    def test_unknown_keys_kept_as_extras(self, config_dir):
        assert load_profile('shop', config_dir).extras == {'retention_days': 30}

    def test_missing_profile(self, config_dir):
        with pytest.raises(FileNotFoundError, match='Available profiles'):
            load_profile('nope', config_dir)

    def test_bad_export_format(self, tmp_path):
        (tmp_path / 'bad.yaml').write_text("export_format: xlsx\n")
        with pytest.raises(ValueError, match='export_format'):
            load_profile('bad', tmp_path)

    def test_bad_query_section(self, tmp_path):
        (tmp_path / 'bad.yaml').write_text("queries:\n  category_sales: 5\n")
        with pytest.raises(ValueError, match='category_sales'):
            load_profile('bad', tmp_path)

    def test_database_env_override(self, monkeypatch, config_dir):
        monkeypatch.setenv('RETAIL_SQL_DB', '/tmp/override.duckdb')
        assert load_profile('shop', config_dir).database == '/tmp/override.duckdb'

    def test_list_profiles_skips_underscored(self, config_dir):
        assert list_available_profiles(config_dir) == ['shop']
        assert {'default', 'demo'} <= set(list_available_profiles())

    def test_coerce_param_by_name(self):
        assert coerce_param('top_n', '7') == 7
        assert coerce_param('end_date', '2023-05-01') == date(2023, 5, 1)
        assert coerce_param('city', '10001') == '10001'
        assert coerce_param('top_n', 7) == 7

    def test_returned_params_are_copies(self):
        profile = load_profile('default')
        profile.get_query_params('customers_by_city')['city'] = 'Paris'
        assert profile.get_query_params('customers_by_city') == {'city': 'New York'}


class TestProfileCache:

    def test_cached(self):
        assert get_profile('default') is get_profile('default')

    def test_cache_bypass_and_clear(self):
        first = get_profile('default')
        assert get_profile('default', use_cache=False) is not first
        clear_config_cache()
        assert get_profile('default') is not first

    def test_reload(self):
        first = get_profile('demo')
        assert reload_profile('demo') is not first

    def test_env_selects_profile(self, monkeypatch):
        monkeypatch.setenv('RETAIL_SQL_PROFILE', 'demo')
        assert get_profile().name == 'demo'

    def test_get_query_params(self):
        assert get_query_params('demo', 'customers_by_city') == {'city': 'Chicago'}
