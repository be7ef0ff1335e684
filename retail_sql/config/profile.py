"""
Profile configuration loader.

Reads YAML files describing where the database and dataset live and
which parameters each analytical query runs with.

Usage:
    from retail_sql.config.profile import get_profile

    profile = get_profile('default')
    params = profile.get_query_params('orders_in_period')

Environment:
    RETAIL_SQL_PROFILE  profile name used when none is given
    RETAIL_SQL_DB       overrides the profile's database path
"""

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_PROFILE = 'default'
PROFILE_ENV = 'RETAIL_SQL_PROFILE'
DATABASE_ENV = 'RETAIL_SQL_DB'

EXPORT_FORMATS = ('parquet', 'csv')


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class RetailProfile:
    """Database location, dataset paths and query parameters."""
    name: str
    description: str = ''
    database: str = ':memory:'
    data_dir: str = 'data/raw'
    output_dir: str = 'outputs'
    export_format: str = 'parquet'
    queries: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    # Profile-specific extras (e.g. synthetic dataset sizes)
    extras: Dict[str, Any] = field(default_factory=dict)

    def get_query_params(self, query_name: str) -> Dict[str, Any]:
        """Parameter overrides for one query (empty dict if none)."""
        return dict(self.queries.get(query_name, {}))

    @property
    def is_in_memory(self) -> bool:
        return self.database == ':memory:'

    def __repr__(self):
        return (f"RetailProfile({self.name}, database={self.database}, "
                f"queries={list(self.queries.keys())})")


# =============================================================================
# LOADER FUNCTIONS
# =============================================================================

def _default_config_dir() -> Path:
    return Path(__file__).parent.parent / 'profiles'


# Parameters bound as integers; everything else not *_date stays a string
INTEGER_PARAMS = {'top_n'}


def coerce_param(key: str, value: Any) -> Any:
    """
    Coerce a query parameter by name.

    *_date strings become datetime.date, INTEGER_PARAMS strings become int.
    Other values pass through unchanged.
    """
    if not isinstance(value, str):
        return value
    if key.endswith('_date'):
        return date.fromisoformat(value)
    if key in INTEGER_PARAMS:
        return int(value)
    return value


def _parse_queries(raw: Optional[Dict]) -> Dict[str, Dict[str, Any]]:
    """Parse the queries section from YAML."""
    queries = {}
    for name, params in (raw or {}).items():
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ValueError(f"Parameters for query '{name}' must be a mapping, got {type(params).__name__}")
        queries[name] = {k: coerce_param(k, v) for k, v in params.items()}
    return queries


def load_profile(name: str, config_dir: Path = None) -> RetailProfile:
    """
    Load a profile from YAML.

    Args:
        name: Profile name (e.g., 'default', 'demo')
        config_dir: Directory containing YAML files (default: retail_sql/profiles/)

    Returns:
        RetailProfile object

    Raises:
        FileNotFoundError: If profile file doesn't exist
        ValueError: If the export format or a query section is invalid
        yaml.YAMLError: If YAML is invalid
    """
    if config_dir is None:
        config_dir = _default_config_dir()
    config_dir = Path(config_dir)

    yaml_path = config_dir / f"{name}.yaml"

    if not yaml_path.exists():
        raise FileNotFoundError(
            f"Profile not found: {yaml_path}\n"
            f"Available profiles: {list_available_profiles(config_dir)}"
        )

    with open(yaml_path, 'r') as f:
        raw = yaml.safe_load(f) or {}

    export_format = raw.get('export_format', 'parquet')
    if export_format not in EXPORT_FORMATS:
        raise ValueError(f"export_format must be one of {EXPORT_FORMATS}, got {export_format!r}")

    known_keys = {'profile', 'description', 'database', 'data_dir',
                  'output_dir', 'export_format', 'queries'}
    extras = {k: v for k, v in raw.items() if k not in known_keys}

    database = os.environ.get(DATABASE_ENV) or str(raw.get('database', ':memory:'))

    return RetailProfile(
        name=raw.get('profile', name),
        description=raw.get('description', ''),
        database=database,
        data_dir=str(raw.get('data_dir', 'data/raw')),
        output_dir=str(raw.get('output_dir', 'outputs')),
        export_format=export_format,
        queries=_parse_queries(raw.get('queries')),
        extras=extras,
    )


def list_available_profiles(config_dir: Path = None) -> List[str]:
    """
    List all available profiles.

    Returns:
        Sorted list of profile names
    """
    if config_dir is None:
        config_dir = _default_config_dir()
    config_dir = Path(config_dir)

    if not config_dir.exists():
        return []

    return sorted(
        f.stem for f in config_dir.glob('*.yaml')
        if not f.name.startswith('_')
    )


# =============================================================================
# CACHING
# =============================================================================

_config_cache: Dict[str, RetailProfile] = {}


def get_profile(name: Optional[str] = None, use_cache: bool = True) -> RetailProfile:
    """
    Get a profile (cached by default).

    Args:
        name: Profile name (default: $RETAIL_SQL_PROFILE or 'default')
        use_cache: Whether to use cached config

    Returns:
        RetailProfile object
    """
    if name is None:
        name = os.environ.get(PROFILE_ENV, DEFAULT_PROFILE)

    if use_cache and name in _config_cache:
        return _config_cache[name]

    profile = load_profile(name)

    if use_cache:
        _config_cache[name] = profile

    return profile


def clear_config_cache():
    """Clear the configuration cache."""
    _config_cache.clear()


def reload_profile(name: str) -> RetailProfile:
    """Force reload a profile."""
    if name in _config_cache:
        del _config_cache[name]
    return get_profile(name)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def get_query_params(name: Optional[str], query_name: str) -> Dict[str, Any]:
    """Parameter overrides for one query from a named profile."""
    return get_profile(name).get_query_params(query_name)
