"""
tpch-lake Dagster Definitions

Asset layers:
- Landing: raw TPC-H orders / lineitem (generated on DuckDB, Snowflake share on prod)
- Staging: dbt views renaming TPC-H columns
- Marts: dbt tables - order items, per-order summary, fct_orders

Automation:
- tpch_daily_schedule - runs tpch_daily_job once a day, two retries per op
- tpch_run_failure_sensor - logs failed runs
"""
from dagster import Definitions

from .assets import tpch_dbt_models
from .config import CONFIG
from .landing import snowflake_source_specs, tpch_landing
from .resources import dbt_resource
from .schedules import tpch_daily_job, tpch_daily_schedule
from .sensors import tpch_run_failure_sensor

if CONFIG.uses_duckdb:
    # Landing checks ride on tpch_landing as check_specs
    landing_assets = [tpch_landing]
else:
    landing_assets = snowflake_source_specs

defs = Definitions(
    assets=[*landing_assets, tpch_dbt_models],
    jobs=[tpch_daily_job],
    schedules=[tpch_daily_schedule],
    sensors=[tpch_run_failure_sensor],
    resources={
        "dbt": dbt_resource,
    },
)
