"""
Run Sensors

Failures are logged with enough context to find the run in the UI.
"""
from dagster import (
    DefaultSensorStatus,
    RunFailureSensorContext,
    run_failure_sensor,
)


@run_failure_sensor(
    name="tpch_run_failure_sensor",
    default_status=DefaultSensorStatus.RUNNING,
)
def tpch_run_failure_sensor(context: RunFailureSensorContext):
    run = context.dagster_run
    context.log.error(
        f"Run {run.run_id} of job {run.job_name} failed: {context.failure_event.message}"
    )
