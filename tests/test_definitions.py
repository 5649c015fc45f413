"""Smoke tests for the Dagster definitions.

@dbt_assets needs a compiled manifest, so these skip until one exists:

    cd tpch_lake && dbt deps && dbt parse
"""

from pathlib import Path

import pytest
from dagster import AssetKey

import tpch_lake

MANIFEST = Path(tpch_lake.__file__).parent / "target" / "manifest.json"

pytestmark = pytest.mark.skipif(
    not MANIFEST.exists(), reason="dbt manifest not compiled (run `dbt parse` in tpch_lake/)"
)


class TestDefinitions:
    """The code location loads and wires every layer."""

    def test_definitions_load(self) -> None:
        from tpch_lake.definitions import defs

        asset_graph = defs.resolve_asset_graph()
        keys = asset_graph.get_all_asset_keys()

        for model in (
            "stg_tpch_orders",
            "stg_tpch_line_items",
            "int_order_items",
            "int_order_items_summary",
            "fct_orders",
        ):
            assert AssetKey([model]) in keys
        assert AssetKey(["tpch", "orders"]) in keys
        assert AssetKey(["tpch", "lineitem"]) in keys

    def test_models_grouped_by_folder(self) -> None:
        from tpch_lake.assets import tpch_dbt_models

        groups = tpch_dbt_models.group_names_by_key
        assert groups[AssetKey(["stg_tpch_orders"])] == "staging"
        assert groups[AssetKey(["fct_orders"])] == "marts"

    def test_staging_depends_on_landing(self) -> None:
        from tpch_lake.definitions import defs

        asset_graph = defs.resolve_asset_graph()
        parents = asset_graph.get(AssetKey(["stg_tpch_orders"])).parent_keys
        assert AssetKey(["tpch", "orders"]) in parents

    def test_dbt_tests_become_checks(self) -> None:
        from tpch_lake.assets import tpch_dbt_models

        checked_assets = {check_key.asset_key for check_key in tpch_dbt_models.check_keys}
        assert AssetKey(["fct_orders"]) in checked_assets

    def test_daily_schedule(self) -> None:
        from tpch_lake.config import CONFIG
        from tpch_lake.definitions import defs

        schedule = defs.get_schedule_def("tpch_daily_schedule")
        assert schedule.cron_schedule == CONFIG.schedule_cron
        assert schedule.job_name == "tpch_daily_job"
