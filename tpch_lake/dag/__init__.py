# DAG folder contains data flow definitions:
# - landing/: DDL files for raw TPC-H tables, one folder per source
# - staging and marts models live in the dbt project (../models/)
