"""
Snowflake Bootstrap

Renders the one-off account setup the prod dbt target needs: a virtual
warehouse, a database with a schema for dbt's output, and a role that owns
them. Run the rendered script in a worksheet as ACCOUNTADMIN.

    python -m tpch_lake snowflake-setup --user jdoe
    python -m tpch_lake snowflake-teardown
"""
import re
from dataclasses import dataclass

from .exceptions import ConfigurationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]{0,254}$")

WAREHOUSE_SIZES = (
    "x-small",
    "small",
    "medium",
    "large",
    "x-large",
    "2x-large",
    "3x-large",
    "4x-large",
)


@dataclass(frozen=True)
class SnowflakeObjects:
    """Names of the Snowflake objects dbt runs against (match profiles.yml)."""

    warehouse: str = "dbt_wh"
    database: str = "dbt_db"
    role: str = "dbt_role"
    schema: str = "dbt_schema"
    warehouse_size: str = "x-small"

    def validate(self) -> None:
        """Raise ConfigurationError for names that aren't plain identifiers."""
        for field_name in ("warehouse", "database", "role", "schema"):
            value = getattr(self, field_name)
            if not _IDENTIFIER.match(value):
                raise ConfigurationError(
                    f"Snowflake {field_name} name {value!r} is not a valid unquoted identifier"
                )
        if self.warehouse_size.lower() not in WAREHOUSE_SIZES:
            raise ConfigurationError(
                f"warehouse_size must be one of {list(WAREHOUSE_SIZES)}, "
                f"got: {self.warehouse_size!r}"
            )


def quote_user(user: str) -> str:
    """Quote a user name unless it's already a plain identifier (emails need quoting)."""
    if not user:
        raise ConfigurationError("Snowflake user name must not be empty")
    if _IDENTIFIER.match(user):
        return user
    return '"' + user.replace('"', '""') + '"'


def setup_statements(user: str, objects: SnowflakeObjects | None = None) -> list[str]:
    """Statements that create the warehouse, database, role and schema."""
    objects = objects or SnowflakeObjects()
    objects.validate()
    grantee = quote_user(user)

    return [
        "use role accountadmin",
        f"create warehouse if not exists {objects.warehouse} "
        f"with warehouse_size = '{objects.warehouse_size.lower()}'",
        f"create database if not exists {objects.database}",
        f"create role if not exists {objects.role}",
        f"grant usage on warehouse {objects.warehouse} to role {objects.role}",
        f"grant role {objects.role} to user {grantee}",
        f"grant all on database {objects.database} to role {objects.role}",
        f"use role {objects.role}",
        f"create schema if not exists {objects.database}.{objects.schema}",
    ]


def teardown_statements(objects: SnowflakeObjects | None = None) -> list[str]:
    """Statements that drop everything setup_statements created."""
    objects = objects or SnowflakeObjects()
    objects.validate()

    return [
        "use role accountadmin",
        f"drop warehouse if exists {objects.warehouse}",
        f"drop database if exists {objects.database}",
        f"drop role if exists {objects.role}",
    ]


def render_script(statements: list[str]) -> str:
    """Join statements into a worksheet-ready script."""
    return "".join(f"{statement};\n" for statement in statements)
