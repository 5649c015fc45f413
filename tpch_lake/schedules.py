"""
Jobs and Schedules

One job materializes every executable asset (landing on DuckDB, then all
dbt models) once a day. Retries are handled by the op retry policy.
"""
from dagster import (
    AssetSelection,
    DefaultScheduleStatus,
    RetryPolicy,
    ScheduleDefinition,
    define_asset_job,
)

from .config import CONFIG

# AssetSelection.all() leaves out external assets (the Snowflake share)
tpch_daily_job = define_asset_job(
    name="tpch_daily_job",
    selection=AssetSelection.all(),
    description="""
    Full TPC-H medallion refresh.

    1. Landing: regenerate raw orders and line items (DuckDB target only)
    2. Staging: stg_tpch_orders, stg_tpch_line_items views
    3. Marts: int_order_items, int_order_items_summary, fct_orders tables
    """,
    op_retry_policy=RetryPolicy(
        max_retries=CONFIG.max_retries,
        delay=CONFIG.retry_delay_seconds,
    ),
)

tpch_daily_schedule = ScheduleDefinition(
    name="tpch_daily_schedule",
    job=tpch_daily_job,
    cron_schedule=CONFIG.schedule_cron,
    execution_timezone=CONFIG.schedule_timezone,
    default_status=DefaultScheduleStatus.RUNNING,
)
