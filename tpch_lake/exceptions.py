"""Custom exceptions for the tpch-lake pipeline.

These separate configuration problems from data problems so a failed run
says which one it hit.
"""


class TpchLakeError(Exception):
    """Base exception for all tpch-lake errors."""

    pass


class ConfigurationError(TpchLakeError):
    """Raised when configuration is invalid or incomplete.

    Examples:
    - Unknown dbt target
    - Non-positive scale factor
    - Invalid Snowflake object name
    """

    pass


class DataValidationError(TpchLakeError):
    """Raised when warehouse data fails validation.

    Args:
        asset_name: Name of the asset (or table) that failed validation
        message: Detailed error message
    """

    def __init__(self, asset_name: str, message: str):
        self.asset_name = asset_name
        super().__init__(f"[{asset_name}] {message}")


class MissingTableError(DataValidationError):
    """Raised when a required warehouse table doesn't exist.

    Usually means landing hasn't run yet, or the warehouse path is wrong.
    """

    def __init__(self, asset_name: str, table_name: str, available_tables: list[str]):
        self.table_name = table_name
        self.available_tables = available_tables
        message = (
            f"Table '{table_name}' not found in warehouse. "
            f"Available tables: {available_tables}. "
            f"Did you run `python -m tpch_lake seed` first?"
        )
        super().__init__(asset_name, message)


class WarehouseUnavailableError(TpchLakeError):
    """Raised when the warehouse file can't be attached.

    Args:
        db_path: Warehouse file that failed to attach
        reason: What DuckDB (or the filesystem) reported
    """

    def __init__(self, db_path: str, reason: str):
        self.db_path = db_path
        super().__init__(f"Cannot open warehouse '{db_path}': {reason}")


class WarehouseNotFoundError(WarehouseUnavailableError):
    """Raised when a read-only attach targets a warehouse file that doesn't exist."""

    def __init__(self, db_path: str):
        super().__init__(
            db_path,
            "file does not exist. Did you run `python -m tpch_lake seed` first?",
        )
