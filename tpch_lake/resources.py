import os
from pathlib import Path

from dagster_dbt import DbtCliResource, DbtProject

from .config import CONFIG, PROJECT_ROOT

# Paths
DBT_PROJECT_DIR = Path(__file__).parent  # tpch_lake/

# profiles.yml reads these; dbt runs from DBT_PROJECT_DIR so the path must be absolute
os.environ["TPCH_LAKE_DB_PATH"] = str(CONFIG.db_path)
os.environ["TPCH_LAKE_DBT_TARGET"] = CONFIG.dbt_target

# Find dbt executable - check venv first, then system
VENV_DBT = PROJECT_ROOT / ".venv" / "bin" / "dbt"
DBT_EXECUTABLE = str(VENV_DBT) if VENV_DBT.exists() else "dbt"

tpch_dbt_project = DbtProject(
    project_dir=DBT_PROJECT_DIR,
    profiles_dir=DBT_PROJECT_DIR,
    target=CONFIG.dbt_target,
)
# Compiles target/manifest.json under `dagster dev`; deployments bake it at build time
tpch_dbt_project.prepare_if_dev()

DBT_MANIFEST = tpch_dbt_project.manifest_path

# Resources
dbt_resource = DbtCliResource(
    project_dir=tpch_dbt_project,
    dbt_executable=DBT_EXECUTABLE,
)

__all__ = [
    "dbt_resource",
    "tpch_dbt_project",
    "DBT_PROJECT_DIR",
    "DBT_MANIFEST",
]
