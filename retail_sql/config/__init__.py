"""Retail SQL Configuration Module."""

from retail_sql.config.profile import (
    RetailProfile,
    DEFAULT_PROFILE,
    PROFILE_ENV,
    DATABASE_ENV,
    load_profile,
    list_available_profiles,
    get_profile,
    clear_config_cache,
    reload_profile,
    get_query_params,
)

__all__ = [
    'RetailProfile',
    'DEFAULT_PROFILE',
    'PROFILE_ENV',
    'DATABASE_ENV',
    'load_profile',
    'list_available_profiles',
    'get_profile',
    'clear_config_cache',
    'reload_profile',
    'get_query_params',
]
