"""SQLite database configuration."""

import sqlite3
from typing import TYPE_CHECKING, Any, ClassVar, Optional, TypedDict

from typing_extensions import NotRequired

from sqlmigrate.adapters.sqlite.driver import SqliteConnection, SqliteDriver
from sqlmigrate.config import SyncDatabaseConfig
from sqlmigrate.exceptions import DatabaseConnectionError
from sqlmigrate.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlmigrate.config import MigrationConfig

logger = get_logger("adapters.sqlite.config")

__all__ = ("SqliteConfig", "SqliteConnectionParams")


class SqliteConnectionParams(TypedDict, total=False):
    """SQLite connection parameters."""

    database: NotRequired[str]
    timeout: NotRequired[float]
    detect_types: NotRequired[int]
    check_same_thread: NotRequired[bool]
    cached_statements: NotRequired[int]
    uri: NotRequired[bool]


class SqliteConfig(SyncDatabaseConfig[SqliteConnection, SqliteDriver]):
    """SQLite configuration.

    Connections are opened in autocommit mode: each statement of a migration
    takes effect as soon as it runs.
    """

    driver_type: "ClassVar[type[SqliteDriver]]" = SqliteDriver
    connection_type: "ClassVar[type[SqliteConnection]]" = SqliteConnection

    def __init__(
        self,
        *,
        connection_config: "Optional[SqliteConnectionParams | dict[str, Any]]" = None,
        migration_config: "Optional[MigrationConfig]" = None,
        bind_key: "Optional[str]" = None,
    ) -> None:
        """Initialize SQLite configuration.

        Args:
            connection_config: Parameters passed to :func:`sqlite3.connect`
            migration_config: Migration configuration
            bind_key: Optional bind key for the configuration
        """
        connection_config = dict(connection_config or {})
        connection_config.setdefault("database", ":memory:")
        database_path = str(connection_config["database"])
        if database_path.startswith("file:") and not connection_config.get("uri"):
            logger.debug("Database URI detected (%s) but uri=True not set. Auto-enabling URI mode.", database_path)
            connection_config["uri"] = True
        super().__init__(connection_config=connection_config, migration_config=migration_config, bind_key=bind_key)

    def create_connection(self) -> SqliteConnection:
        """Open a SQLite connection in autocommit mode.

        Raises:
            DatabaseConnectionError: If the database file cannot be opened.
        """
        try:
            return sqlite3.connect(**self.connection_config, isolation_level=None)
        except sqlite3.Error as e:
            msg = f"Could not open SQLite database {self.connection_config.get('database')!r}: {e}"
            raise DatabaseConnectionError(msg) from e
