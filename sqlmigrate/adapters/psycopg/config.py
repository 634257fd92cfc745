"""Psycopg database configuration."""

from typing import TYPE_CHECKING, Any, ClassVar, Optional, TypedDict

import psycopg
from typing_extensions import NotRequired

from sqlmigrate.adapters.psycopg.driver import PsycopgConnection, PsycopgDriver
from sqlmigrate.config import SyncDatabaseConfig
from sqlmigrate.exceptions import DatabaseConnectionError

if TYPE_CHECKING:
    from sqlmigrate.config import MigrationConfig

__all__ = ("PsycopgConfig", "PsycopgConnectionParams")


class PsycopgConnectionParams(TypedDict, total=False):
    """Psycopg connection configuration.

    Basic connection parameters for psycopg.connect().
    """

    conninfo: NotRequired[str]
    """Connection string in libpq format."""

    host: NotRequired[str]
    """Database server host."""

    port: NotRequired[int]
    """Database server port."""

    user: NotRequired[str]
    """Database user."""

    password: NotRequired[str]
    """Database password."""

    dbname: NotRequired[str]
    """Database name."""

    connect_timeout: NotRequired[float]
    """Connection timeout in seconds."""

    application_name: NotRequired[str]
    """Application name for logging and statistics."""

    sslmode: NotRequired[str]
    """SSL mode (disable, prefer, require, etc.)."""


class PsycopgConfig(SyncDatabaseConfig[PsycopgConnection, PsycopgDriver]):
    """Configuration for synchronous psycopg connections.

    Connections are opened with ``autocommit=True`` so every migration
    statement is committed as soon as it runs.
    """

    driver_type: "ClassVar[type[PsycopgDriver]]" = PsycopgDriver
    connection_type: "ClassVar[type[PsycopgConnection]]" = PsycopgConnection

    def __init__(
        self,
        *,
        connection_config: "Optional[PsycopgConnectionParams | dict[str, Any]]" = None,
        migration_config: "Optional[MigrationConfig]" = None,
        bind_key: "Optional[str]" = None,
    ) -> None:
        super().__init__(
            connection_config=dict(connection_config or {}), migration_config=migration_config, bind_key=bind_key
        )

    def create_connection(self) -> PsycopgConnection:
        """Open a PostgreSQL connection in autocommit mode.

        Raises:
            DatabaseConnectionError: If the server cannot be reached or rejects the login.
        """
        config = dict(self.connection_config)
        conninfo = config.pop("conninfo", "")
        try:
            return psycopg.connect(conninfo, autocommit=True, **config)
        except psycopg.Error as e:
            msg = f"PostgreSQL connection error: {e}"
            raise DatabaseConnectionError(msg) from e
