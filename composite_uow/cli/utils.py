"""Shared helpers for CLI commands."""

import logging

import composite_uow.cli as cli
from composite_uow.catalog import SchemaCatalog
from composite_uow.orm.connection import DBConnection
from composite_uow.schema import REGRESSION_CATALOG

logger = logging.getLogger("Composite-UoW")

CATALOG_FILE = "catalog.yaml"
DB_FILE = "db.yaml"


def load_catalog() -> SchemaCatalog:
    """Load `catalog.yaml` from the config path, falling back to the regression catalog."""
    if cli.CONFIG_PATH is not None and (cli.CONFIG_PATH / CATALOG_FILE).exists():
        logger.info(f"Loading catalog from {cli.CONFIG_PATH / CATALOG_FILE}")
        return SchemaCatalog.from_yaml(cli.CONFIG_PATH / CATALOG_FILE)
    return REGRESSION_CATALOG


def load_db_connection(db_url: str | None = None) -> DBConnection:
    """Resolve the database to use: explicit URL, then `db.yaml`, then environment defaults."""
    if db_url is not None:
        return DBConnection(url=db_url)
    if cli.CONFIG_PATH is not None and (cli.CONFIG_PATH / DB_FILE).exists():
        return DBConnection.from_config(cli.CONFIG_PATH)
    return DBConnection.from_env()
