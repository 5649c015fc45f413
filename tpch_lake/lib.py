"""
Warehouse Library

Core functions for landing and checking TPC-H data. No Dagster dependencies.

Landing:
- reconcile_ddl: create landing tables / add missing columns from DDL files
- generate_tpch / load_tpch_table: full refresh from DuckDB's TPC-H generator

Checks:
- count_rows, count_duplicate_keys, count_null_values, count_orphaned_keys
"""
import re
from pathlib import Path

import duckdb

from .exceptions import (
    MissingTableError,
    WarehouseNotFoundError,
    WarehouseUnavailableError,
)

WAREHOUSE = "warehouse"
# Table-level clauses that can share the column list
TABLE_CONSTRAINTS = {"PRIMARY", "UNIQUE", "CHECK", "FOREIGN", "CONSTRAINT"}
GENERATOR_SCHEMA = "memory.main"
LANDING_DIR = Path(__file__).parent / "dag" / "landing"


def get_warehouse_connection(db_path: str | Path, read_only: bool = False) -> duckdb.DuckDBPyConnection:
    """
    Create an in-memory DuckDB connection with the warehouse file attached.

    Raises WarehouseNotFoundError for a read-only attach of a missing file,
    and WarehouseUnavailableError when DuckDB can't open the file (e.g. held
    by another writer).
    """
    if read_only and not Path(db_path).exists():
        raise WarehouseNotFoundError(str(db_path))

    conn = duckdb.connect(":memory:")
    options = " (READ_ONLY)" if read_only else ""
    escaped = str(db_path).replace("'", "''")
    try:
        conn.execute(f"ATTACH '{escaped}' AS {WAREHOUSE}{options}")
    except duckdb.IOException as e:
        conn.close()
        raise WarehouseUnavailableError(str(db_path), str(e)) from e
    return conn


# =============================================================================
# Landing Discovery
# =============================================================================

def discover_landing_tables() -> list[tuple[str, str]]:
    """
    Scan landing/ directory, return [(source, table), ...]

    landing/tpch/orders.sql → ("tpch", "orders")
    """
    if not LANDING_DIR.exists():
        return []

    tables = []
    for source_dir in LANDING_DIR.iterdir():
        if not source_dir.is_dir() or source_dir.name.startswith("_"):
            continue
        for ddl_file in source_dir.glob("*.sql"):
            if ddl_file.name.startswith("_"):
                continue
            tables.append((source_dir.name, ddl_file.stem))
    return sorted(tables)


def read_landing_ddl(source: str, table: str) -> str:
    """Read the DDL file for a landing table."""
    return (LANDING_DIR / source / f"{table}.sql").read_text()


# =============================================================================
# DDL Parsing
# =============================================================================

def _strip_sql_comments(sql: str) -> str:
    return "\n".join(line.split("--", 1)[0] for line in sql.splitlines())


def parse_table_name(ddl: str) -> str:
    """Extract table name from CREATE TABLE statement."""
    match = re.search(r"CREATE TABLE IF NOT EXISTS\s+([^\s(]+)", ddl, re.IGNORECASE)
    if match:
        return match.group(1)
    raise ValueError(f"Could not parse table name from DDL: {ddl[:100]}...")


def _split_top_level(body: str) -> list[str]:
    """Split on commas that aren't nested inside parentheses (DECIMAL(15, 2))."""
    parts = []
    depth = 0
    current = ""
    for char in body:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += char
    parts.append(current.strip())
    return [part for part in parts if part]


def parse_columns_from_ddl(ddl: str) -> dict[str, str]:
    """Extract column names and types from DDL, in declaration order."""
    match = re.search(r"\((.*)\)\s*;?\s*$", _strip_sql_comments(ddl), re.DOTALL)
    if not match:
        return {}

    columns = {}
    for col_def in _split_top_level(match.group(1)):
        parts = col_def.split(None, 1)
        if parts[0].split("(", 1)[0].upper() in TABLE_CONSTRAINTS:
            continue
        if len(parts) == 2:
            columns[parts[0]] = parts[1].strip()
    return columns


# =============================================================================
# Table Introspection
# =============================================================================

def list_tables(conn: duckdb.DuckDBPyConnection, catalog: str = WAREHOUSE) -> list[str]:
    """List schema-qualified tables in an attached catalog."""
    rows = conn.execute(
        """
        SELECT schema_name || '.' || table_name
        FROM duckdb_tables()
        WHERE database_name = ?
        ORDER BY 1
        """,
        [catalog],
    ).fetchall()
    return [row[0] for row in rows]


def get_existing_columns(conn: duckdb.DuckDBPyConnection, table_name: str) -> dict[str, str]:
    """Get existing columns of a table, empty if the table doesn't exist."""
    try:
        result = conn.execute(f"DESCRIBE {table_name}").fetchall()
    except duckdb.CatalogException:
        return {}
    return {row[0]: row[1] for row in result}


def table_exists(conn: duckdb.DuckDBPyConnection, table_name: str) -> bool:
    """Check if a table exists."""
    try:
        conn.execute(f"DESCRIBE {table_name}")
        return True
    except duckdb.CatalogException:
        return False


def _require_table(conn: duckdb.DuckDBPyConnection, table_name: str) -> None:
    if not table_exists(conn, table_name):
        catalog = table_name.split(".")[0] if table_name.count(".") == 2 else WAREHOUSE
        raise MissingTableError(table_name, table_name, list_tables(conn, catalog))


# =============================================================================
# Landing Tables - DDL Reconciliation
# =============================================================================

def reconcile_ddl(conn: duckdb.DuckDBPyConnection, ddl: str) -> tuple[str, str, list[str]]:
    """
    Reconcile one landing DDL statement against the warehouse.

    - Creates the table (and its schema) when missing
    - Adds columns declared in the DDL but absent from the table
    - Idempotent: safe to run on every materialization

    Returns (table_name, status, added_columns) where status is
    "created", "altered" or "unchanged".
    """
    table_name = parse_table_name(ddl)

    if not table_exists(conn, table_name):
        schema_name = table_name.rsplit(".", 1)[0]
        if schema_name != table_name:
            conn.execute(f"CREATE SCHEMA IF NOT EXISTS {schema_name};")
        conn.execute(ddl)
        return table_name, "created", []

    existing_cols = get_existing_columns(conn, table_name)
    ddl_cols = parse_columns_from_ddl(ddl)
    new_cols = [col for col in ddl_cols if col not in existing_cols]

    for col_name in new_cols:
        conn.execute(f"ALTER TABLE {table_name} ADD COLUMN {col_name} {ddl_cols[col_name]};")

    return table_name, "altered" if new_cols else "unchanged", new_cols


# =============================================================================
# Landing Tables - TPC-H Load
# =============================================================================

def generate_tpch(conn: duckdb.DuckDBPyConnection, scale_factor: float) -> None:
    """
    Generate TPC-H tables in the connection's in-memory catalog.

    Runs once per connection; the generator is deterministic for a given
    scale factor, so later calls reuse the tables already generated.
    """
    if table_exists(conn, f"{GENERATOR_SCHEMA}.orders"):
        return
    conn.execute("INSTALL tpch; LOAD tpch;")
    conn.execute(f"CALL dbgen(sf = {float(scale_factor)})")


def replace_table_contents(
    conn: duckdb.DuckDBPyConnection,
    table_name: str,
    source_relation: str,
) -> int:
    """
    Full refresh of a landing table from another relation.

    Only columns present in both are copied; landing columns the source
    lacks stay NULL. Returns the landing table's row count afterwards.
    """
    _require_table(conn, table_name)
    _require_table(conn, source_relation)

    source_cols = get_existing_columns(conn, source_relation)
    shared = [col for col in get_existing_columns(conn, table_name) if col in source_cols]
    column_list = ", ".join(shared)

    conn.execute("BEGIN TRANSACTION")
    try:
        conn.execute(f"DELETE FROM {table_name}")
        conn.execute(
            f"INSERT INTO {table_name} ({column_list}) "
            f"SELECT {column_list} FROM {source_relation}"
        )
        conn.execute("COMMIT")
    except duckdb.Error:
        conn.execute("ROLLBACK")
        raise

    return count_rows(conn, table_name)


def load_tpch_table(
    conn: duckdb.DuckDBPyConnection,
    table_name: str,
    scale_factor: float,
) -> int:
    """Replace a landing table with freshly generated TPC-H rows."""
    generate_tpch(conn, scale_factor)
    source_table = table_name.rsplit(".", 1)[-1]
    return replace_table_contents(conn, table_name, f"{GENERATOR_SCHEMA}.{source_table}")


# =============================================================================
# Source Data Checks
# =============================================================================

def count_rows(conn: duckdb.DuckDBPyConnection, table_name: str) -> int:
    """Row count of a table."""
    _require_table(conn, table_name)
    return conn.execute(f"SELECT count(*) FROM {table_name}").fetchone()[0]


def count_duplicate_keys(
    conn: duckdb.DuckDBPyConnection,
    table_name: str,
    key_columns: list[str],
) -> int:
    """Number of distinct key values that appear more than once."""
    _require_table(conn, table_name)
    keys = ", ".join(key_columns)
    return conn.execute(f"""
        SELECT count(*) FROM (
            SELECT {keys} FROM {table_name}
            GROUP BY {keys}
            HAVING count(*) > 1
        )
    """).fetchone()[0]


def count_null_values(conn: duckdb.DuckDBPyConnection, table_name: str, column: str) -> int:
    """Number of rows where a column is NULL."""
    _require_table(conn, table_name)
    return conn.execute(
        f"SELECT count(*) FROM {table_name} WHERE {column} IS NULL"
    ).fetchone()[0]


def count_orphaned_keys(
    conn: duckdb.DuckDBPyConnection,
    child_table: str,
    child_column: str,
    parent_table: str,
    parent_column: str,
) -> int:
    """
    Number of child rows whose key has no match in the parent table.

    NULL child keys are not counted (same rule as dbt's relationships test).
    """
    _require_table(conn, child_table)
    _require_table(conn, parent_table)
    return conn.execute(f"""
        SELECT count(*) FROM {child_table} AS child
        WHERE child.{child_column} IS NOT NULL
          AND NOT EXISTS (
              SELECT 1 FROM {parent_table} AS parent
              WHERE parent.{parent_column} = child.{child_column}
          )
    """).fetchone()[0]
