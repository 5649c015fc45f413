"""tpch-lake: TPC-H medallion pipeline orchestrated by Dagster, transformed by dbt."""
