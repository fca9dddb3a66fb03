import logging
from typing import Dict, Optional

import sqlalchemy
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from config.settings import DatabaseConfig

logger = logging.getLogger(__name__)


class DataSourceError(RuntimeError):
    """Raised when the hosted tabular store cannot serve a request."""


class DatabaseClient:
    """
    Thin wrapper around the hosted tabular store.

    Keeps SQLAlchemy engine and table reflection details away from the
    API and analytics layers.
    """

    def __init__(self, config: DatabaseConfig, engine: Optional[Engine] = None):
        self.config = config
        self._engine: Optional[Engine] = engine
        self._tables: Dict[str, sqlalchemy.Table] = {}

    @property
    def engine(self) -> Engine:
        """Lazy-create the SQLAlchemy engine."""
        if self._engine is None:
            kwargs = {"pool_pre_ping": True}
            if self.config.driver != "sqlite":
                kwargs.update(
                    pool_size=self.config.pool_size,
                    max_overflow=self.config.max_overflow,
                )
            self._engine = sqlalchemy.create_engine(self.config.connection_string, **kwargs)
        return self._engine

    def table(self, name: str) -> sqlalchemy.Table:
        """Reflect (once) and return a table definition."""
        if name not in self._tables:
            try:
                self._tables[name] = sqlalchemy.Table(
                    name, sqlalchemy.MetaData(), autoload_with=self.engine
                )
            except NoSuchTableError as exc:
                raise DataSourceError(f"Table '{name}' does not exist") from exc
            except SQLAlchemyError as exc:
                logger.error("Failed to reflect table %s: %s", name, exc)
                raise DataSourceError(f"Failed to read table '{name}': {exc}") from exc
        return self._tables[name]

    def test_connection(self) -> bool:
        """Verify database connectivity."""
        try:
            with self.engine.connect() as conn:
                conn.execute(sqlalchemy.text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning("Database connection failed: %s", exc)
            return False

    def close(self) -> None:
        """Dispose of pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self._tables.clear()
