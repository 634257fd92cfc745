"""Migration command implementations for SQLMigrate.

This module provides the reconciliation engine that compares the migration
scripts on disk with the ledger and applies or reverts the difference.
"""

import logging
import time
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic, Optional

from sqlmigrate.config import SyncConfigT
from sqlmigrate.migrations.base import MigrationResult, MigrationStatus, RanMigration
from sqlmigrate.migrations.loader import UP_SUFFIX, MigrationFileCatalog
from sqlmigrate.migrations.runner import SyncMigrationRunner
from sqlmigrate.migrations.tracker import SyncMigrationTracker
from sqlmigrate.migrations.utils import create_migration_file
from sqlmigrate.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from sqlmigrate.driver import SyncDriverAdapterBase

__all__ = ("SyncMigrationCommands",)


class SyncMigrationCommands(Generic[SyncConfigT]):
    """Synchronous migration commands.

    One connection is opened when the commands object is created and held
    until :meth:`close_driver` is called. Use the object as a context manager
    to release the connection on every exit path::

        with SyncMigrationCommands(config) as commands:
            commands.ensure_migrations_table_exists()
            result = commands.run_up_migrations()

    Every command re-reads the ledger and the migration directory, so commands
    can be invoked repeatedly on the same object.
    """

    __slots__ = ("catalog", "config", "driver", "logger", "runner", "tracker")

    def __init__(
        self,
        config: SyncConfigT,
        logger: "Optional[logging.Logger]" = None,
        catalog: "Optional[MigrationFileCatalog]" = None,
    ) -> None:
        """Initialize migration commands.

        Args:
            config: The database configuration to migrate.
            logger: Logger to report progress and failures to. Defaults to the
                ``sqlmigrate.migrations.commands`` logger.
            catalog: Migration file catalog. Defaults to one over the
                configuration's ``script_location``.

        Raises:
            DatabaseConnectionError: If the connection cannot be opened.
        """
        self.config = config
        self.logger = logger if logger is not None else get_logger("migrations.commands")
        self.catalog = catalog if catalog is not None else MigrationFileCatalog(config.script_location)
        self.tracker = SyncMigrationTracker(config.version_table)
        self.runner = SyncMigrationRunner(self.tracker, logger=self.logger)
        self.driver: "SyncDriverAdapterBase[Any]" = config.create_driver()

    def __enter__(self) -> "SyncMigrationCommands[SyncConfigT]":
        return self

    def __exit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: "Optional[BaseException]",
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        self.close_driver()

    def _log_command_summary(
        self, command: str, result: MigrationResult, start_time: float, **extra_fields: Any
    ) -> None:
        log_with_context(
            self.logger,
            logging.INFO,
            "migration.command.summary",
            command=command,
            num_ran=result.num_ran,
            batch_number=result.batch_number,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
            dialect=self.driver.dialect,
            bind_key=self.config.bind_key,
            **extra_fields,
        )

    def ensure_migrations_table_exists(self) -> None:
        """Create the ledger table if it is missing."""
        self.tracker.ensure_tracking_table(self.driver)

    def _pending_migrations(self) -> "list[str]":
        candidates = self.catalog.list_candidates(UP_SUFFIX)
        ran = {entry.filename for entry in self.tracker.get_ran_migrations(self.driver)}
        return sorted(candidates - ran)

    def run_up_migrations(self) -> MigrationResult:
        """Run every migration that is on disk but not in the ledger.

        Pending migrations run in ascending filename order and are all recorded
        under the next batch number. An empty up file is skipped and never
        recorded. A migration whose statements fail is logged and left
        unrecorded; the remaining migrations still run.

        Raises:
            MigrationFileError: If the migration directory or a file cannot be read.
            LedgerError: If a successful migration cannot be recorded.

        Returns:
            The number of migrations that ran and the batch they ran in.
        """
        start_time = time.perf_counter()
        batch_number = self.tracker.get_next_batch_number(self.driver)
        pending = self._pending_migrations()
        self.logger.debug("Found %d pending migrations for batch %d", len(pending), batch_number)

        num_ran = 0
        for filename in pending:
            content = self.catalog.read_migration(filename)
            if not content:
                self.logger.debug("Skipping empty migration %s", filename)
                continue
            self.logger.debug("Running migration %s", filename)
            if self.runner.run_up_migration(self.driver, content, filename, batch_number):
                num_ran += 1

        result = MigrationResult(num_ran=num_ran, batch_number=batch_number)
        self._log_command_summary("up", result, start_time, pending_count=len(pending))
        return result

    def _revert_entries(self, entries: "Iterator[RanMigration]") -> int:
        num_ran = 0
        for filename, batch in entries:
            if not filename.endswith(UP_SUFFIX):
                self.logger.debug("Ignoring ledger entry %s without an up suffix", filename)
                continue
            down_filename = self.catalog.down_filename_for(filename)
            if not self.catalog.has_migration(down_filename):
                self.logger.warning("No down migration %s found, leaving %s recorded", down_filename, filename)
                continue
            content = self.catalog.read_migration(down_filename)
            self.logger.debug("Reverting migration %s from batch %d", filename, batch)
            if self.runner.run_down_migration(self.driver, content, filename, batch):
                num_ran += 1
        return num_ran

    def revert_last_ran_migrations(self) -> MigrationResult:
        """Revert the migrations recorded in the most recent batch.

        Migrations without a down file stay recorded and are not counted.

        Returns:
            The number of migrations reverted and the batch they belonged to,
            ``0`` when the ledger is empty.
        """
        start_time = time.perf_counter()
        batch_number = self.tracker.get_last_batch_number(self.driver)
        entries = (
            RanMigration(filename, batch_number)
            for filename in self.tracker.get_migrations_for_batch(self.driver, batch_number)
        )
        result = MigrationResult(num_ran=self._revert_entries(entries), batch_number=batch_number)
        self._log_command_summary("down", result, start_time)
        return result

    def revert_all_migrations(self) -> MigrationResult:
        """Revert every recorded migration, newest batch first.

        Returns:
            The number of migrations reverted. The batch number is always ``0``.
        """
        start_time = time.perf_counter()
        num_ran = self._revert_entries(self.tracker.get_ran_migrations(self.driver))
        result = MigrationResult(num_ran=num_ran, batch_number=0)
        self._log_command_summary("reset", result, start_time)
        return result

    def refresh_migrations(self) -> "tuple[MigrationResult, MigrationResult]":
        """Revert every migration, then run them all again.

        Returns:
            The revert result followed by the run result.
        """
        reverted = self.revert_all_migrations()
        applied = self.run_up_migrations()
        return reverted, applied

    def get_migration_status(self) -> MigrationStatus:
        """Report the ledger contents and the migrations still waiting to run."""
        ran = list(self.tracker.get_ran_migrations(self.driver))
        return MigrationStatus(ran=ran, pending=self._pending_migrations())

    def close_driver(self) -> None:
        """Release the database connection. Safe to call more than once."""
        self.driver.close()

    def get_all_tables_for_database(self, database: str) -> Iterator[str]:
        """Yield the tables in ``database``, leaving out the ledger table."""
        return self.driver.data_dictionary.get_tables(self.driver, database, exclude=(self.tracker.version_table,))

    def get_create_for_table(self, table: str, database: str = "") -> str:
        return self.driver.data_dictionary.get_create_for_table(self.driver, table, database)

    def get_drop_for_table(self, table: str, database: str = "") -> str:
        return self.driver.data_dictionary.get_drop_for_table(self.driver, table, database)

    def dump_schema(self, database: str) -> str:
        """Build a SQL snapshot of every user table in ``database``.

        Each table contributes its drop statement followed by its create
        statement, in table name order.
        """
        blocks = [
            f"{self.get_drop_for_table(table, database)}\n{self.get_create_for_table(table, database)};"
            for table in self.get_all_tables_for_database(database)
        ]
        log_with_context(self.logger, logging.DEBUG, "migration.dump", database=database, table_count=len(blocks))
        return "\n\n".join(blocks) + ("\n" if blocks else "")

    def create_migration(self, name: str) -> "tuple[Path, Path]":
        """Create an empty, timestamped up/down migration pair in the migration directory."""
        up_path, down_path = create_migration_file(self.catalog.migrations_path, name)
        log_with_context(
            self.logger, logging.DEBUG, "migration.create", up_file=str(up_path), down_file=str(down_path)
        )
        return up_path, down_path
