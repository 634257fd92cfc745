"""SQLMigrate: ordered, batch-tracked SQL schema migrations."""

from sqlmigrate import adapters, driver, exceptions, migrations, storage, utils
from sqlmigrate.__metadata__ import __version__
from sqlmigrate.config import MigrationConfig, SyncDatabaseConfig
from sqlmigrate.driver import SyncDataDictionaryBase, SyncDriverAdapterBase
from sqlmigrate.exceptions import (
    DatabaseConnectionError,
    ImproperConfigurationError,
    LedgerError,
    MigrationFileError,
    MissingDependencyError,
    SQLMigrateError,
    StatementExecutionError,
)
from sqlmigrate.migrations import MigrationResult, MigrationStatus, RanMigration, SyncMigrationCommands

__all__ = (
    "DatabaseConnectionError",
    "ImproperConfigurationError",
    "LedgerError",
    "MigrationConfig",
    "MigrationFileError",
    "MigrationResult",
    "MigrationStatus",
    "MissingDependencyError",
    "RanMigration",
    "SQLMigrateError",
    "StatementExecutionError",
    "SyncDataDictionaryBase",
    "SyncDatabaseConfig",
    "SyncDriverAdapterBase",
    "SyncMigrationCommands",
    "__version__",
    "adapters",
    "driver",
    "exceptions",
    "migrations",
    "storage",
    "utils",
)
