"""
Retail SQL Command Line Interface

Usage:
    python -m retail_sql <command> [args]

Commands:
    init        Create tables, views and indexes in the profile database
    generate    Write a synthetic dataset
    load        Load a dataset directory into the database
    queries     List the analytical queries and their parameters
    query       Run one query and print the result
    run         Full pipeline: load, build views/indexes, export all queries
    validate    Check the query results against their invariants
    report      Render the sales report

Examples:
    python -m retail_sql generate --data-dir data/raw
    python -m retail_sql query customers_by_city --param city=Chicago
    python -m retail_sql run --output-dir outputs/
    python -m retail_sql --profile demo validate

An in-memory database (':memory:') is filled from the profile's data_dir
on every command; a file database is used as-is.
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

import duckdb

from retail_sql.config import get_profile, RetailProfile
from retail_sql.config.profile import coerce_param

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(message)s'


# ============================================================
# HELPERS
# ============================================================

def parse_param(text: str) -> Tuple[str, Any]:
    """
    Parse a key=value query parameter.

    The parameter name picks the type (see coerce_param): top_n is int,
    *_date keys become datetime.date, anything else stays a string.
    """
    if '=' not in text:
        raise argparse.ArgumentTypeError(f"Expected key=value, got '{text}'")
    key, value = text.split('=', 1)
    key = key.strip()
    value = value.strip()
    if not key:
        raise argparse.ArgumentTypeError(f"Empty parameter name in '{text}'")
    try:
        return key, coerce_param(key, value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Bad value for {key}: {e}")


def _setup_logging(args) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def _database(args, profile: RetailProfile) -> str:
    return args.database or profile.database


def _data_dir(args, profile: RetailProfile) -> str:
    return getattr(args, 'data_dir', None) or profile.data_dir


def _open(args, profile: RetailProfile):
    """Open the orchestrator; fill in-memory databases from the dataset."""
    from retail_sql.sql import SQLOrchestrator

    db_path = _database(args, profile)
    orchestrator = SQLOrchestrator(db_path)
    if db_path == ':memory:':
        try:
            orchestrator.create_schema()
            orchestrator.load_dataset(_data_dir(args, profile))
            orchestrator.run_all()
        except Exception:
            orchestrator.close()
            raise
    return orchestrator


def _params_by_query(profile: RetailProfile, query_name: Optional[str] = None,
                     overrides: Optional[List[Tuple[str, Any]]] = None) -> Dict[str, Dict[str, Any]]:
    params = {name: dict(p) for name, p in profile.queries.items()}
    if query_name and overrides:
        params.setdefault(query_name, {}).update(dict(overrides))
    return params


# ============================================================
# COMMANDS
# ============================================================

def cmd_init(args, profile: RetailProfile) -> int:
    """Create schema, views and indexes."""
    from retail_sql.sql import SQLOrchestrator

    with SQLOrchestrator(_database(args, profile)) as orchestrator:
        executed = orchestrator.run_all(rebuild=True)
    print(f"Initialized {_database(args, profile)}: {', '.join(executed)}")
    return 0


def cmd_generate(args, profile: RetailProfile) -> int:
    """Write a synthetic dataset."""
    from retail_sql.synthetic import generate_dataset, write_dataset

    sizes = dict(profile.extras.get('synthetic', {}))
    for key in ('n_customers', 'n_products', 'n_orders', 'seed'):
        value = getattr(args, key)
        if value is not None:
            sizes[key] = value

    frames = generate_dataset(**sizes)
    paths = write_dataset(frames, _data_dir(args, profile), fmt=args.format)
    for table, path in paths.items():
        print(f"  {table:<12} {len(frames[table]):>7,} rows -> {path}")
    return 0


def cmd_load(args, profile: RetailProfile) -> int:
    """Load a dataset directory into the database."""
    from retail_sql.sql import SQLOrchestrator

    with SQLOrchestrator(_database(args, profile)) as orchestrator:
        orchestrator.create_schema()
        loaded = orchestrator.load_dataset(_data_dir(args, profile), replace=args.replace)
    for table, rows in loaded.items():
        print(f"  {table:<12} {rows:>7,} rows")
    return 0


def cmd_queries(args, profile: RetailProfile) -> int:
    """List queries with their default and profile parameters."""
    from retail_sql.sql import QUERIES

    for name, query_class in QUERIES:
        doc = (query_class.__doc__ or '').strip().split('\n')[0]
        params = dict(query_class.PARAMS)
        params.update(profile.get_query_params(name))
        shown = ', '.join(f"{k}={v}" for k, v in params.items())
        print(f"  {name:<26} {doc}")
        if shown:
            print(f"  {'':<26} params: {shown}")
    return 0


def cmd_query(args, profile: RetailProfile) -> int:
    """Run one query and print it."""
    params = _params_by_query(profile, args.name, args.param).get(args.name, {})
    with _open(args, profile) as orchestrator:
        df = orchestrator.run_query(args.name, **params)

    if args.limit is not None:
        df = df.head(args.limit)

    if args.format == 'csv':
        print(df.to_csv(index=False), end='')
    elif args.format == 'json':
        print(df.to_json(orient='records', date_format='iso', indent=2))
    else:
        print(df.to_string(index=False))
    return 0


def cmd_run(args, profile: RetailProfile) -> int:
    """Full pipeline."""
    from retail_sql.sql import SQLOrchestrator

    output_dir = args.output_dir or profile.output_dir
    fmt = args.format or profile.export_format

    with SQLOrchestrator(_database(args, profile)) as orchestrator:
        result = orchestrator.run_pipeline(
            data_dir=_data_dir(args, profile),
            output_dir=output_dir,
            params_by_query=_params_by_query(profile),
            fmt=fmt,
        )

    print("\n" + "=" * 60)
    print("PIPELINE COMPLETE")
    print("=" * 60)
    print(f"Status: {result['status']}")
    print(f"Input rows: {sum(result['input_rows'].values()):,}")
    print(f"Output dir: {result['output_dir']}")
    print(f"Files: {len(result['files'])}")
    return 0


def cmd_validate(args, profile: RetailProfile) -> int:
    """Run the invariant checks."""
    from retail_sql.validation import validate_database

    with _open(args, profile) as orchestrator:
        results = validate_database(orchestrator, _params_by_query(profile))

    failed = 0
    for name, passed, message in results:
        if passed:
            print(f"  ✓ {name}")
        else:
            print(f"  ✗ {name}: {message}")
            failed += 1

    if failed:
        print(f"\n✗ {failed} VALIDATION CHECKS FAILED")
        return 1
    print("\n✓ ALL VALIDATION CHECKS PASSED")
    return 0


def cmd_report(args, profile: RetailProfile) -> int:
    """Render the sales report."""
    from reports.sales_report import generate_sales_report

    with _open(args, profile) as orchestrator:
        report = generate_sales_report(orchestrator, _params_by_query(profile), profile_name=profile.name)

    if args.output:
        if args.output.endswith('.json'):
            report.save_json(args.output)
        else:
            report.save_markdown(args.output)
        print(f"Report saved to: {args.output}")
    else:
        print(report.to_text())
    return 0


# ============================================================
# MAIN
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='retail_sql',
        description='Retail SQL analytics on DuckDB',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m retail_sql generate --data-dir data/raw
    python -m retail_sql query product_pareto --limit 10
    python -m retail_sql run --output-dir outputs/
        """,
    )
    parser.add_argument('--profile', '-p', default=None, help='Profile name (default: $RETAIL_SQL_PROFILE or default)')
    parser.add_argument('--database', '-d', default=None, help='DuckDB path (overrides profile)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--quiet', '-q', action='store_true', help='Warnings only')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    subparsers.add_parser('init', help='Create tables, views and indexes')

    generate_parser = subparsers.add_parser('generate', help='Write a synthetic dataset')
    generate_parser.add_argument('--data-dir', default=None, help='Output directory (default: profile data_dir)')
    generate_parser.add_argument('--format', choices=['parquet', 'csv'], default='parquet')
    generate_parser.add_argument('--customers', dest='n_customers', type=int, default=None)
    generate_parser.add_argument('--products', dest='n_products', type=int, default=None)
    generate_parser.add_argument('--orders', dest='n_orders', type=int, default=None)
    generate_parser.add_argument('--seed', type=int, default=None)

    load_parser = subparsers.add_parser('load', help='Load a dataset directory')
    load_parser.add_argument('--data-dir', default=None, help='Dataset directory (default: profile data_dir)')
    load_parser.add_argument('--replace', action='store_true', help='Empty tables before loading')

    subparsers.add_parser('queries', help='List analytical queries')

    query_parser = subparsers.add_parser('query', help='Run one query')
    query_parser.add_argument('name', help='Query name (see `queries`)')
    query_parser.add_argument('--param', action='append', type=parse_param, default=[],
                              metavar='KEY=VALUE', help='Parameter override (repeatable)')
    query_parser.add_argument('--data-dir', default=None, help='Dataset for in-memory databases')
    query_parser.add_argument('--format', choices=['table', 'csv', 'json'], default='table')
    query_parser.add_argument('--limit', type=int, default=None, help='Print at most N rows')

    run_parser = subparsers.add_parser('run', help='Load, build and export everything')
    run_parser.add_argument('--data-dir', default=None, help='Dataset directory')
    run_parser.add_argument('--output-dir', default=None, help='Export directory')
    run_parser.add_argument('--format', choices=['parquet', 'csv'], default=None)

    validate_parser = subparsers.add_parser('validate', help='Check query invariants')
    validate_parser.add_argument('--data-dir', default=None, help='Dataset for in-memory databases')

    report_parser = subparsers.add_parser('report', help='Render the sales report')
    report_parser.add_argument('--data-dir', default=None, help='Dataset for in-memory databases')
    report_parser.add_argument('--output', '-o', default=None, help='Output file (md or json)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Retail SQL CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args)

    handlers = {
        'init': cmd_init,
        'generate': cmd_generate,
        'load': cmd_load,
        'queries': cmd_queries,
        'query': cmd_query,
        'run': cmd_run,
        'validate': cmd_validate,
        'report': cmd_report,
    }

    try:
        profile = get_profile(args.profile)
        return handlers[args.command](args, profile)
    except (FileNotFoundError, ValueError, RuntimeError, duckdb.Error) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
