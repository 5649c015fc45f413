"""
TPC-H dbt Asset Definitions

Staging / Marts - every dbt model, run with `dbt build` so dbt tests surface
as asset checks. Landing tables live in landing.py.
"""
from typing import Any, Mapping

from dagster import AssetExecutionContext
from dagster_dbt import (
    DagsterDbtTranslator,
    DagsterDbtTranslatorSettings,
    DbtCliResource,
    dbt_assets,
)

from .resources import DBT_MANIFEST


class TpchDbtTranslator(DagsterDbtTranslator):
    """Groups models by their folder under models/ (staging, marts)."""

    def get_group_name(self, dbt_resource_props: Mapping[str, Any]) -> str:
        fqn = dbt_resource_props.get("fqn", [])
        # ["tpch_lake", "marts", "fct_orders"] -> "marts"
        return fqn[1] if len(fqn) > 2 else "tpch_lake"


@dbt_assets(
    manifest=DBT_MANIFEST,
    dagster_dbt_translator=TpchDbtTranslator(
        settings=DagsterDbtTranslatorSettings(enable_asset_checks=True)
    ),
    name="tpch_dbt_models",
)
def tpch_dbt_models(context: AssetExecutionContext, dbt: DbtCliResource):
    """Staging views and marts tables. Dependencies auto-wired via ref() and source()."""
    yield from dbt.cli(["build"], context=context).stream()
