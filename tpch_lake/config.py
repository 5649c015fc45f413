"""Configuration for the tpch-lake pipeline.

All values come from environment variables (optionally via a .env file at
the project root) with defaults suitable for a local DuckDB run.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigurationError

PROJECT_ROOT = Path(__file__).parent.parent

env_file = PROJECT_ROOT / ".env"
if env_file.exists():
    load_dotenv(env_file)

DBT_TARGETS = ("dev", "prod")


def _resolve_path(value: str) -> Path:
    """Relative paths are relative to the project root, not the working directory."""
    path = Path(value)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path.resolve()


@dataclass(frozen=True)
class TpchLakeConfig:
    """Validated pipeline configuration.

    Attributes:
        db_path: DuckDB warehouse file (dev target)
        dbt_target: dbt target name, "dev" (DuckDB) or "prod" (Snowflake)
        scale_factor: TPC-H scale factor used when generating landing data
        schedule_cron: Cron expression for the daily schedule
        schedule_timezone: Timezone the schedule is evaluated in
        max_retries: Op retries for the daily job
        retry_delay_seconds: Delay between op retries
    """

    db_path: Path
    dbt_target: str = "dev"
    scale_factor: float = 0.01
    schedule_cron: str = "0 0 * * *"
    schedule_timezone: str = "UTC"
    max_retries: int = 2
    retry_delay_seconds: int = 60

    @property
    def uses_duckdb(self) -> bool:
        """True when dbt runs against the local DuckDB warehouse."""
        return self.dbt_target == "dev"

    def validate(self) -> None:
        """Validate configuration at startup.

        Creates the warehouse directory if it doesn't exist.

        Raises:
            ConfigurationError: If any configuration is invalid
        """
        if self.dbt_target not in DBT_TARGETS:
            raise ConfigurationError(
                f"dbt_target must be one of {list(DBT_TARGETS)}, got: {self.dbt_target!r}"
            )

        if self.scale_factor <= 0:
            raise ConfigurationError(
                f"scale_factor must be positive, got: {self.scale_factor}"
            )

        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must not be negative, got: {self.max_retries}"
            )

        if self.retry_delay_seconds < 0:
            raise ConfigurationError(
                f"retry_delay_seconds must not be negative, got: {self.retry_delay_seconds}"
            )

        if len(self.schedule_cron.split()) != 5:
            raise ConfigurationError(
                f"schedule_cron must have five fields, got: {self.schedule_cron!r}"
            )

        if not self.uses_duckdb:
            return

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Failed to create warehouse directory {self.db_path.parent}: {e}"
            ) from e

        if not os.access(self.db_path.parent, os.W_OK):
            raise ConfigurationError(
                f"Warehouse directory {self.db_path.parent} is not writable"
            )

    @classmethod
    def from_env(cls) -> "TpchLakeConfig":
        """Load and validate configuration from environment variables.

        Environment Variables:
            TPCH_LAKE_DB_PATH: DuckDB warehouse (default: data/tpch_lake.duckdb)
            TPCH_LAKE_DBT_TARGET: dbt target (default: dev)
            TPCH_LAKE_SCALE_FACTOR: TPC-H scale factor (default: 0.01)
            TPCH_LAKE_SCHEDULE: Cron for the daily job (default: 0 0 * * *)
            TPCH_LAKE_TIMEZONE: Schedule timezone (default: UTC)
            TPCH_LAKE_MAX_RETRIES: Op retries (default: 2)
            TPCH_LAKE_RETRY_DELAY_SECONDS: Delay between retries (default: 60)

        Raises:
            ConfigurationError: If a value can't be parsed or is invalid
        """
        try:
            config = cls(
                db_path=_resolve_path(
                    os.environ.get("TPCH_LAKE_DB_PATH", "data/tpch_lake.duckdb")
                ),
                dbt_target=os.environ.get("TPCH_LAKE_DBT_TARGET", "dev"),
                scale_factor=float(os.environ.get("TPCH_LAKE_SCALE_FACTOR", "0.01")),
                schedule_cron=os.environ.get("TPCH_LAKE_SCHEDULE", "0 0 * * *"),
                schedule_timezone=os.environ.get("TPCH_LAKE_TIMEZONE", "UTC"),
                max_retries=int(os.environ.get("TPCH_LAKE_MAX_RETRIES", "2")),
                retry_delay_seconds=int(
                    os.environ.get("TPCH_LAKE_RETRY_DELAY_SECONDS", "60")
                ),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        config.validate()

        return config


try:
    CONFIG = TpchLakeConfig.from_env()
except ConfigurationError as e:
    raise ConfigurationError(
        f"Failed to load configuration: {e}\n\n"
        f"Check your TPCH_LAKE_* environment variables."
    ) from e
