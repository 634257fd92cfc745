"""Migration execution engine for SQLMigrate.

Runs the statements of one migration script and keeps the ledger in step
with it.
"""

import logging
import time
from typing import TYPE_CHECKING, Optional

from sqlmigrate.exceptions import StatementExecutionError
from sqlmigrate.migrations.loader import split_sql_statements
from sqlmigrate.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from sqlmigrate.driver import SyncDriverAdapterBase
    from sqlmigrate.migrations.tracker import SyncMigrationTracker

__all__ = ("SyncMigrationRunner",)


class SyncMigrationRunner:
    """Executes single migration scripts.

    Statements are not wrapped in a transaction. If a statement fails, the
    statements before it stay applied and the ledger is left untouched, so the
    migration counts as not run.
    """

    __slots__ = ("logger", "tracker")

    def __init__(self, tracker: "SyncMigrationTracker", logger: "Optional[logging.Logger]" = None) -> None:
        self.tracker = tracker
        self.logger = logger if logger is not None else get_logger("migrations.runner")

    def _execute_statements(self, driver: "SyncDriverAdapterBase", content: str) -> int:
        statements = split_sql_statements(content)
        for statement in statements:
            driver.execute(statement)
        return len(statements)

    def run_up_migration(self, driver: "SyncDriverAdapterBase", content: str, filename: str, batch: int) -> bool:
        """Run and record an upwards migration.

        Args:
            driver: The database driver to use.
            content: Text of the ``.up.sql`` file.
            filename: Name of the ``.up.sql`` file, as stored in the ledger.
            batch: Batch number to record the migration under.

        Returns:
            ``True`` if every statement ran and the migration was recorded.
        """
        start_time = time.perf_counter()
        try:
            statement_count = self._execute_statements(driver, content)
        except StatementExecutionError as e:
            self.logger.error("Error running migration '%s': %s", filename, e)
            return False
        self.tracker.record_migration(driver, filename, batch)
        log_with_context(
            self.logger,
            logging.DEBUG,
            "migration.apply",
            filename=filename,
            batch=batch,
            statements=statement_count,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return True

    def run_down_migration(self, driver: "SyncDriverAdapterBase", content: str, filename: str, batch: int) -> bool:
        """Run a downwards migration and remove its ledger entry.

        Args:
            driver: The database driver to use.
            content: Text of the ``.down.sql`` file.
            filename: Name of the ``.up.sql`` file the ledger entry holds.
            batch: Batch the ledger entry belongs to.

        Returns:
            ``True`` if every statement ran and the entry was removed.
        """
        start_time = time.perf_counter()
        try:
            statement_count = self._execute_statements(driver, content)
        except StatementExecutionError as e:
            self.logger.error("Error reversing migration '%s': %s", filename, e)
            return False
        self.tracker.remove_migration(driver, filename, batch)
        log_with_context(
            self.logger,
            logging.DEBUG,
            "migration.revert",
            filename=filename,
            batch=batch,
            statements=statement_count,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return True
