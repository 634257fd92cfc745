"""SQLMigrate migration tool.

Applies and reverts ``{name}.up.sql`` / ``{name}.down.sql`` scripts and keeps
track of what has run in a ledger table.
"""

from sqlmigrate.migrations.base import BaseMigrationTracker, MigrationResult, MigrationStatus, RanMigration
from sqlmigrate.migrations.commands import SyncMigrationCommands
from sqlmigrate.migrations.loader import DOWN_SUFFIX, UP_SUFFIX, MigrationFileCatalog, split_sql_statements
from sqlmigrate.migrations.runner import SyncMigrationRunner
from sqlmigrate.migrations.tracker import SyncMigrationTracker
from sqlmigrate.migrations.utils import create_migration_file, generate_timestamp_version

__all__ = (
    "DOWN_SUFFIX",
    "UP_SUFFIX",
    "BaseMigrationTracker",
    "MigrationFileCatalog",
    "MigrationResult",
    "MigrationStatus",
    "RanMigration",
    "SyncMigrationCommands",
    "SyncMigrationRunner",
    "SyncMigrationTracker",
    "create_migration_file",
    "generate_timestamp_version",
    "split_sql_statements",
)
