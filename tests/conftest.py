"""Pytest fixtures for tpch-lake tests.

Provides temporary DuckDB warehouses so library, CLI and dbt tests never
touch the real warehouse file.

Key fixtures:
- warehouse_path: path to an empty warehouse file in tmp_path
- warehouse: connection with the warehouse attached (landing tables not created)
- landed_warehouse: connection with landing tables created and small TPC-H rows loaded
- tpch_generator: skips when DuckDB's tpch extension can't be loaded
"""

from pathlib import Path
from typing import Iterator

import duckdb
import pytest

from tpch_lake.lib import (
    get_warehouse_connection,
    read_landing_ddl,
    reconcile_ddl,
)

ORDERS = "warehouse.tpch_sf1.orders"
LINEITEM = "warehouse.tpch_sf1.lineitem"

# (o_orderkey, o_custkey, o_orderstatus, o_totalprice, o_orderdate)
SAMPLE_ORDERS = [
    (1, 10, "O", 300.00, "1995-01-01"),
    (2, 11, "F", 150.00, "1996-06-15"),
    (3, 12, "P", 80.00, "1997-03-03"),
]

# (l_orderkey, l_partkey, l_linenumber, l_quantity, l_extendedprice, l_discount, l_tax)
SAMPLE_LINEITEMS = [
    (1, 100, 1, 1, 100.00, 0.05, 0.02),
    (1, 101, 2, 2, 200.00, 0.10, 0.02),
    (2, 102, 1, 3, 150.00, 0.00, 0.04),
    (3, 103, 1, 1, 80.00, 0.04, 0.00),
]


def insert_sample_orders(conn: duckdb.DuckDBPyConnection) -> None:
    conn.executemany(
        f"""
        INSERT INTO {ORDERS} (o_orderkey, o_custkey, o_orderstatus, o_totalprice, o_orderdate)
        VALUES (?, ?, ?, ?, CAST(? AS DATE))
        """,
        SAMPLE_ORDERS,
    )


def insert_sample_lineitems(conn: duckdb.DuckDBPyConnection) -> None:
    conn.executemany(
        f"""
        INSERT INTO {LINEITEM} (
            l_orderkey, l_partkey, l_linenumber, l_quantity,
            l_extendedprice, l_discount, l_tax
        )
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        SAMPLE_LINEITEMS,
    )


def insert_sample_rows(conn: duckdb.DuckDBPyConnection) -> None:
    """Insert SAMPLE_ORDERS / SAMPLE_LINEITEMS into existing landing tables."""
    insert_sample_orders(conn)
    insert_sample_lineitems(conn)


@pytest.fixture
def warehouse_path(tmp_path: Path) -> Path:
    """Path to a warehouse file that doesn't exist yet."""
    return tmp_path / "warehouse.duckdb"


@pytest.fixture
def warehouse(warehouse_path: Path) -> Iterator[duckdb.DuckDBPyConnection]:
    """Connection with an empty warehouse attached."""
    conn = get_warehouse_connection(warehouse_path)
    yield conn
    conn.close()


@pytest.fixture
def landed_warehouse(warehouse: duckdb.DuckDBPyConnection) -> duckdb.DuckDBPyConnection:
    """Warehouse with landing tables created and sample rows inserted."""
    reconcile_ddl(warehouse, read_landing_ddl("tpch", "orders"))
    reconcile_ddl(warehouse, read_landing_ddl("tpch", "lineitem"))
    insert_sample_rows(warehouse)
    return warehouse


@pytest.fixture
def landed_warehouse_path(warehouse_path: Path) -> Path:
    """Warehouse file with sample rows, closed so another process can open it."""
    conn = get_warehouse_connection(warehouse_path)
    reconcile_ddl(conn, read_landing_ddl("tpch", "orders"))
    reconcile_ddl(conn, read_landing_ddl("tpch", "lineitem"))
    insert_sample_rows(conn)
    conn.close()
    return warehouse_path


@pytest.fixture
def tpch_generator() -> None:
    """Skip the test when the tpch extension isn't available (offline CI)."""
    conn = duckdb.connect(":memory:")
    try:
        conn.execute("INSTALL tpch; LOAD tpch;")
    except duckdb.Error as e:
        pytest.skip(f"DuckDB tpch extension unavailable: {e}")
    finally:
        conn.close()
