import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.pool import StaticPool

from composite_uow.catalog import SchemaCatalog
from composite_uow.exceptions import MissingConfigError

logger = logging.getLogger("Composite-UoW")

DEFAULT_DB_URL = "sqlite+pysqlite:///:memory:"


@dataclass
class DBConnection:
    """Database connection configuration."""

    url: str = DEFAULT_DB_URL
    echo: bool = False
    _engine: Engine | None = field(default=None, init=False, repr=False)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and (":memory:" in self.url or self.url.rstrip("/").endswith("sqlite:"))

    def get_engine(self) -> Engine:
        """Create (once) a SQLAlchemy engine using the connection configuration.

        SQLite engines enforce foreign keys on every connection, and in-memory
        databases share a single connection so every session sees the same tables.
        """
        if self._engine is not None:
            return self._engine

        kwargs = {}
        if self.is_memory:
            kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
        engine = create_engine(self.url, echo=self.echo, **kwargs)

        if self.is_sqlite:

            @event.listens_for(engine, "connect")
            def _enable_foreign_keys(dbapi_connection, _connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self._engine = engine
        return engine

    def get_session_factory(self):
        """Create a SQLAlchemy session factory using the connection configuration."""
        from sqlalchemy.orm import sessionmaker

        return sessionmaker(bind=self.get_engine())

    def create_schema(self, catalog: SchemaCatalog):
        """Generate the tables of `catalog` and create them in the database.

        Returns:
            Schema namespace from create_schema().
        """
        from composite_uow.orm.schema_factory import create_schema

        schema = create_schema(catalog)
        schema.metadata.create_all(self.get_engine())
        logger.info(f"Created tables {sorted(table.name for table in schema.metadata.sorted_tables)}")
        return schema

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    @classmethod
    def from_env(cls) -> "DBConnection":
        """Create config from environment variables."""
        return cls(
            url=os.getenv("COMPOSITE_UOW_DB_URL", DEFAULT_DB_URL),
            echo=os.getenv("COMPOSITE_UOW_ECHO", "false").lower() in ("1", "true", "yes"),
        )

    @classmethod
    def from_config(cls, config_path: Path | None = None) -> "DBConnection":
        """Load database connection configuration from a YAML file.

        Args:
            config_path: Directory holding `db.yaml`. If None, uses the CLI config path.
        Returns:
            DBConnection instance with loaded configuration.
        """
        from omegaconf import DictConfig, OmegaConf

        from composite_uow import cli

        resolved_path = config_path or cli.CONFIG_PATH
        if resolved_path is None:
            raise MissingConfigError("config path")

        cfg = OmegaConf.load(resolved_path / "db.yaml")
        if not isinstance(cfg, DictConfig):
            raise TypeError("db.yaml must be a YAML mapping.")  # noqa: TRY003

        return cls(
            url=os.environ.get("COMPOSITE_UOW_DB_URL", cfg.get("url", DEFAULT_DB_URL)),
            echo=bool(cfg.get("echo", False)),
        )
