"""
Landing Assets

Raw TPC-H tables. On the DuckDB target: DDL reconciliation plus a full
refresh from DuckDB's TPC-H generator. On Snowflake: external assets backed
by the snowflake_sample_data share.

The landing checks run inside the landing step on its own connection; a
separate step would fight dbt for the warehouse file lock.
"""
import duckdb
from dagster import (
    AssetCheckKey,
    AssetCheckResult,
    AssetCheckSpec,
    AssetExecutionContext,
    AssetKey,
    AssetSpec,
    MaterializeResult,
    MetadataValue,
    multi_asset,
)

from .config import CONFIG
from .exceptions import MissingTableError
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

LANDING_GROUP = "landing"
ORDERS_KEY = AssetKey(["tpch", "orders"])
LINEITEM_KEY = AssetKey(["tpch", "lineitem"])
ORDERS_TABLE = f"{WAREHOUSE}.tpch_sf1.orders"
LINEITEM_TABLE = f"{WAREHOUSE}.tpch_sf1.lineitem"

_landing_tables = discover_landing_tables()


def landing_asset_key(source: str, table: str) -> AssetKey:
    """Asset key for a landing table; matches dbt's key for source(source, table)."""
    return AssetKey([source, table])


landing_asset_specs = [
    AssetSpec(
        key=landing_asset_key(source, table),
        description=f"Raw {source} {table}, regenerated from the TPC-H generator",
        group_name=LANDING_GROUP,
        kinds={"duckdb"},
        metadata={"ddl": MetadataValue.path(f"dag/landing/{source}/{table}.sql")},
    )
    for source, table in _landing_tables
]

# Prod reads the Snowflake share directly; nothing to materialize
snowflake_source_specs = [
    AssetSpec(
        key=landing_asset_key(source, table),
        description=f"snowflake_sample_data.tpch_sf1.{table}",
        group_name=LANDING_GROUP,
        kinds={"snowflake"},
    )
    for source, table in _landing_tables
]


# =============================================================================
# Landing Checks
# =============================================================================

ORDERS_CHECK = AssetCheckSpec(
    name="orders_have_unique_keys",
    asset=ORDERS_KEY,
    description="Landed orders are non-empty and o_orderkey is unique and never NULL",
)
LINEITEM_CHECK = AssetCheckSpec(
    name="lineitem_orders_exist",
    asset=LINEITEM_KEY,
    description="Every landed line item points at a landed order",
)


def _error_result(spec: AssetCheckSpec, error: Exception) -> AssetCheckResult:
    metadata: dict[str, MetadataValue] = {"error": MetadataValue.text(str(error))}
    if isinstance(error, MissingTableError):
        metadata["available_tables"] = MetadataValue.json(error.available_tables)
    return AssetCheckResult(
        asset_key=spec.asset_key,
        check_name=spec.name,
        passed=False,
        metadata=metadata,
    )


def check_orders(conn: duckdb.DuckDBPyConnection) -> AssetCheckResult:
    """Evaluate ORDERS_CHECK; errors come back as a failed result."""
    try:
        row_count = count_rows(conn, ORDERS_TABLE)
        duplicates = count_duplicate_keys(conn, ORDERS_TABLE, ["o_orderkey"])
        nulls = count_null_values(conn, ORDERS_TABLE, "o_orderkey")
    except (MissingTableError, duckdb.Error) as e:
        return _error_result(ORDERS_CHECK, e)

    return AssetCheckResult(
        asset_key=ORDERS_KEY,
        check_name=ORDERS_CHECK.name,
        passed=row_count > 0 and duplicates == 0 and nulls == 0,
        metadata={
            "row_count": MetadataValue.int(row_count),
            "duplicate_keys": MetadataValue.int(duplicates),
            "null_keys": MetadataValue.int(nulls),
        },
    )


def check_lineitem(conn: duckdb.DuckDBPyConnection) -> AssetCheckResult:
    """Evaluate LINEITEM_CHECK; errors come back as a failed result."""
    try:
        row_count = count_rows(conn, LINEITEM_TABLE)
        orphans = count_orphaned_keys(
            conn, LINEITEM_TABLE, "l_orderkey", ORDERS_TABLE, "o_orderkey"
        )
    except (MissingTableError, duckdb.Error) as e:
        return _error_result(LINEITEM_CHECK, e)

    return AssetCheckResult(
        asset_key=LINEITEM_KEY,
        check_name=LINEITEM_CHECK.name,
        passed=row_count > 0 and orphans == 0,
        metadata={
            "row_count": MetadataValue.int(row_count),
            "orphaned_rows": MetadataValue.int(orphans),
        },
    )


_check_functions = {
    ORDERS_CHECK.key: check_orders,
    LINEITEM_CHECK.key: check_lineitem,
}


# =============================================================================
# Landing Tables
# =============================================================================

@multi_asset(
    name="tpch_landing",
    specs=landing_asset_specs,
    check_specs=[ORDERS_CHECK, LINEITEM_CHECK],
    can_subset=True,
)
def tpch_landing(context: AssetExecutionContext):
    """
    Reconcile landing DDL files, reload each selected table, then check them.

    - Creates missing tables, adds missing columns
    - Replaces table contents with TPC-H rows at the configured scale factor
    - Runs the selected landing checks once every table is loaded
    """
    conn = get_warehouse_connection(CONFIG.db_path)
    context.log.info(
        f"Landing into {CONFIG.db_path} at scale factor {CONFIG.scale_factor}"
    )

    try:
        for key in sorted(context.selected_asset_keys, key=lambda k: k.to_user_string()):
            source, table = key.path
            table_name, status, added = reconcile_ddl(conn, read_landing_ddl(source, table))
            if added:
                context.log.info(f"{table_name}: {status}, added columns {added}")
            else:
                context.log.info(f"{table_name}: {status}")

            row_count = load_tpch_table(conn, table_name, CONFIG.scale_factor)
            context.log.info(f"{table_name}: loaded {row_count:,} rows")

            yield MaterializeResult(
                asset_key=key,
                metadata={
                    "table": MetadataValue.text(table_name),
                    "ddl_status": MetadataValue.text(status),
                    "added_columns": MetadataValue.json(added),
                    "row_count": MetadataValue.int(row_count),
                    "scale_factor": MetadataValue.float(CONFIG.scale_factor),
                },
            )

        selected_checks: set[AssetCheckKey] = set(context.selected_asset_check_keys)
        for check_key, check_function in _check_functions.items():
            if check_key not in selected_checks:
                continue
            result = check_function(conn)
            if not result.passed:
                context.log.warning(f"Landing check {check_key.name} failed: {result.metadata}")
            yield result
    finally:
        conn.close()
