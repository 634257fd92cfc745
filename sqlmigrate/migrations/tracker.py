"""Migration ledger tracking for SQLMigrate.

This module records which migrations have run, and in which batch, in the
``migrations`` table of the target database.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING

from sqlmigrate.exceptions import LedgerError, StatementExecutionError
from sqlmigrate.migrations.base import BaseMigrationTracker, RanMigration
from sqlmigrate.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlmigrate.driver import SyncDriverAdapterBase

__all__ = ("SyncMigrationTracker",)

logger = get_logger("migrations.tracker")


class SyncMigrationTracker(BaseMigrationTracker):
    """Synchronous migration ledger.

    Every query runs against the driver passed in; nothing is cached between
    calls, so each read reflects the ledger as it is now.
    """

    __slots__ = ()

    def ensure_tracking_table(self, driver: "SyncDriverAdapterBase") -> None:
        """Create the ledger table if it doesn't exist.

        Args:
            driver: The database driver to use.
        """
        driver.execute(self._get_create_table_sql(driver))
        logger.debug("Ledger table %s ready", self.version_table)

    def get_ran_migrations(self, driver: "SyncDriverAdapterBase") -> Iterator[RanMigration]:
        """Yield every ledger entry, newest batch first.

        Entries are ordered by batch descending, then filename descending. The
        query runs when iteration starts, so calling this again re-reads the ledger.

        Args:
            driver: The database driver to use.
        """
        for filename, batch in driver.select(self._get_ran_migrations_sql(driver)):
            ran_migration = RanMigration(filename=filename, batch=int(batch))
            logger.debug("Ran migration: %s", ran_migration)
            yield ran_migration

    def get_migrations_for_batch(self, driver: "SyncDriverAdapterBase", batch: int) -> Iterator[str]:
        """Yield the filenames recorded for ``batch``, ordered filename descending."""
        for (filename,) in driver.select(self._get_migrations_for_batch_sql(driver), batch):
            yield filename

    def get_last_batch_number(self, driver: "SyncDriverAdapterBase") -> int:
        """Get the last used batch number.

        Returns:
            ``0`` when the ledger is empty, otherwise the highest recorded batch.
        """
        value = driver.select_value_or_none(self._get_last_batch_sql(driver))
        if value is None or value == "":
            return 0
        return int(value)

    def get_next_batch_number(self, driver: "SyncDriverAdapterBase") -> int:
        return self.get_last_batch_number(driver) + 1

    def record_migration(self, driver: "SyncDriverAdapterBase", filename: str, batch: int) -> None:
        """Record a successfully applied migration.

        Raises:
            LedgerError: If the insert fails.
        """
        try:
            driver.execute(self._get_record_migration_sql(driver), filename, batch)
        except StatementExecutionError as e:
            msg = f"Could not record migration {filename!r} in batch {batch}: {e}"
            raise LedgerError(msg) from e
        logger.debug("Recorded migration %s in batch %d", filename, batch)

    def remove_migration(self, driver: "SyncDriverAdapterBase", filename: str, batch: int) -> None:
        """Remove a ledger entry after its down migration ran.

        Deleting an entry that does not exist is not an error.

        Raises:
            LedgerError: If the delete fails.
        """
        try:
            driver.execute(self._get_remove_migration_sql(driver), filename, batch)
        except StatementExecutionError as e:
            msg = f"Could not remove migration {filename!r} from batch {batch}: {e}"
            raise LedgerError(msg) from e
        logger.debug("Removed migration %s from batch %d", filename, batch)
