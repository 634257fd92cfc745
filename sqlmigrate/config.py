from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional, TypedDict, TypeVar

from typing_extensions import NotRequired

from sqlmigrate.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Generator

    from sqlmigrate.driver import SyncDriverAdapterBase


__all__ = (
    "DEFAULT_MIGRATION_PATH",
    "DEFAULT_VERSION_TABLE",
    "ConnectionT",
    "DriverT",
    "MigrationConfig",
    "SyncConfigT",
    "SyncDatabaseConfig",
)

ConnectionT = TypeVar("ConnectionT")
DriverT = TypeVar("DriverT", bound="SyncDriverAdapterBase[Any]")
SyncConfigT = TypeVar("SyncConfigT", bound="SyncDatabaseConfig[Any, Any]")

logger = get_logger("config")

DEFAULT_MIGRATION_PATH = "migrations"
DEFAULT_VERSION_TABLE = "migrations"


class MigrationConfig(TypedDict, total=False):
    """Configuration options for the migration runner."""

    script_location: NotRequired[str]
    """Directory holding the ``*.up.sql`` / ``*.down.sql`` scripts. Defaults to ``"migrations"``."""

    version_table_name: NotRequired[str]
    """Name of the ledger table. Defaults to ``"migrations"``."""

    enabled: NotRequired[bool]
    """Whether the CLI may run migrations against this configuration. Defaults to ``True``."""


class SyncDatabaseConfig(ABC, Generic[ConnectionT, DriverT]):
    """Base class for sync database configurations.

    A configuration knows how to open a connection for one backend and which
    driver class wraps it. It holds no connection itself.
    """

    __slots__ = ("bind_key", "connection_config", "migration_config")
    driver_type: "ClassVar[type[Any]]"
    connection_type: "ClassVar[type[Any]]"

    def __init__(
        self,
        *,
        connection_config: "Optional[dict[str, Any]]" = None,
        migration_config: "Optional[MigrationConfig]" = None,
        bind_key: "Optional[str]" = None,
    ) -> None:
        self.connection_config: dict[str, Any] = dict(connection_config or {})
        self.migration_config: MigrationConfig = migration_config if migration_config is not None else {}
        self.bind_key = bind_key

    def __hash__(self) -> int:
        return id(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return (
            self.connection_config == other.connection_config
            and self.migration_config == other.migration_config
            and self.bind_key == other.bind_key
        )

    def __repr__(self) -> str:
        parts = ", ".join(
            [
                f"connection_config={self.connection_config!r}",
                f"migration_config={self.migration_config!r}",
                f"bind_key={self.bind_key!r}",
            ]
        )
        return f"{type(self).__name__}({parts})"

    @property
    def script_location(self) -> str:
        return self.migration_config.get("script_location", DEFAULT_MIGRATION_PATH)

    @property
    def version_table(self) -> str:
        return self.migration_config.get("version_table_name", DEFAULT_VERSION_TABLE)

    @property
    def migrations_enabled(self) -> bool:
        return self.migration_config.get("enabled", True)

    @abstractmethod
    def create_connection(self) -> ConnectionT:
        """Create and return a new database connection.

        Raises:
            DatabaseConnectionError: If the connection cannot be opened.
        """
        raise NotImplementedError

    def create_driver(self) -> DriverT:
        """Open a connection and wrap it in this configuration's driver.

        The caller owns the driver and must close it.
        """
        connection = self.create_connection()
        logger.debug("Opened %s connection", type(self).__name__)
        return self.driver_type(connection=connection)  # type: ignore[no-any-return]

    @contextmanager
    def provide_connection(self) -> "Generator[ConnectionT, None, None]":
        """Provide a database connection that is closed on exit."""
        connection = self.create_connection()
        try:
            yield connection
        finally:
            connection.close()  # type: ignore[attr-defined]

    @contextmanager
    def provide_session(self) -> "Generator[DriverT, None, None]":
        """Provide a driver whose connection is closed on exit."""
        driver = self.create_driver()
        try:
            yield driver
        finally:
            driver.close()
