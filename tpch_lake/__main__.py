"""Command line for landing TPC-H data and bootstrapping Snowflake.

Usage:
    python -m tpch_lake seed                      # Land TPC-H data into DuckDB
    python -m tpch_lake seed --scale-factor 0.1   # Bigger sample
    python -m tpch_lake check                     # Check landed data
    python -m tpch_lake snowflake-setup --user jdoe
    python -m tpch_lake snowflake-teardown
"""
import argparse
import sys
from pathlib import Path

from .config import CONFIG
from .exceptions import TpchLakeError
from .lib import (
    WAREHOUSE,
    count_duplicate_keys,
    count_null_values,
    count_orphaned_keys,
    count_rows,
    discover_landing_tables,
    get_warehouse_connection,
    load_tpch_table,
    read_landing_ddl,
    reconcile_ddl,
)
from .snowflake import (
    SnowflakeObjects,
    render_script,
    setup_statements,
    teardown_statements,
)


def seed(db_path: Path, scale_factor: float) -> dict[str, dict]:
    """Reconcile landing DDL and load every landing table."""
    results = {}
    conn = get_warehouse_connection(db_path)
    try:
        for source, table in discover_landing_tables():
            table_name, status, added = reconcile_ddl(conn, read_landing_ddl(source, table))
            row_count = load_tpch_table(conn, table_name, scale_factor)
            results[table_name] = {"status": status, "added": added, "rows": row_count}
    finally:
        conn.close()
    return results


def check(db_path: Path) -> dict[str, bool]:
    """Run the landing checks; returns check name -> passed."""
    orders = f"{WAREHOUSE}.tpch_sf1.orders"
    lineitem = f"{WAREHOUSE}.tpch_sf1.lineitem"

    conn = get_warehouse_connection(db_path, read_only=True)
    try:
        return {
            "orders not empty": count_rows(conn, orders) > 0,
            "orders unique o_orderkey": count_duplicate_keys(conn, orders, ["o_orderkey"]) == 0,
            "orders o_orderkey not null": count_null_values(conn, orders, "o_orderkey") == 0,
            "lineitem not empty": count_rows(conn, lineitem) > 0,
            "lineitem orders exist": count_orphaned_keys(
                conn, lineitem, "l_orderkey", orders, "o_orderkey"
            ) == 0,
        }
    finally:
        conn.close()


def _snowflake_objects(args: argparse.Namespace) -> SnowflakeObjects:
    return SnowflakeObjects(
        warehouse=args.warehouse,
        database=args.database,
        role=args.role,
        schema=args.schema,
        warehouse_size=args.warehouse_size,
    )


def _add_snowflake_arguments(parser: argparse.ArgumentParser) -> None:
    defaults = SnowflakeObjects()
    parser.add_argument("--warehouse", default=defaults.warehouse)
    parser.add_argument("--database", default=defaults.database)
    parser.add_argument("--role", default=defaults.role)
    parser.add_argument("--schema", default=defaults.schema)
    parser.add_argument("--warehouse-size", default=defaults.warehouse_size)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m tpch_lake",
        description="Land TPC-H data and bootstrap the Snowflake account",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed_parser = subparsers.add_parser("seed", help="Load TPC-H data into the DuckDB warehouse")
    seed_parser.add_argument("--db", type=Path, default=CONFIG.db_path, help="Warehouse file")
    seed_parser.add_argument(
        "--scale-factor",
        type=float,
        default=CONFIG.scale_factor,
        help=f"TPC-H scale factor (default: {CONFIG.scale_factor})",
    )

    check_parser = subparsers.add_parser("check", help="Check landed TPC-H data")
    check_parser.add_argument("--db", type=Path, default=CONFIG.db_path, help="Warehouse file")

    setup_parser = subparsers.add_parser("snowflake-setup", help="Print Snowflake setup SQL")
    setup_parser.add_argument("--user", required=True, help="User granted the dbt role")
    _add_snowflake_arguments(setup_parser)

    teardown_parser = subparsers.add_parser(
        "snowflake-teardown", help="Print Snowflake teardown SQL"
    )
    _add_snowflake_arguments(teardown_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "seed":
            if args.scale_factor <= 0:
                parser.error("--scale-factor must be positive")
            print(f"Seeding {args.db} at scale factor {args.scale_factor}")
            results = seed(args.db, args.scale_factor)
            for table_name, result in results.items():
                print(f"  {table_name}: {result['status']}, {result['rows']:,} rows")
                if result["added"]:
                    print(f"    added columns: {', '.join(result['added'])}")

        elif args.command == "check":
            results = check(args.db)
            for name, passed in results.items():
                print(f"  {'PASS' if passed else 'FAIL'}  {name}")
            if not all(results.values()):
                return 1

        elif args.command == "snowflake-setup":
            print(render_script(setup_statements(args.user, _snowflake_objects(args))), end="")

        elif args.command == "snowflake-teardown":
            print(render_script(teardown_statements(_snowflake_objects(args))), end="")

    except TpchLakeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
