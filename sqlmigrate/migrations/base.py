"""Shared migration types and the ledger SQL builders."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from sqlmigrate.config import DEFAULT_VERSION_TABLE

if TYPE_CHECKING:
    from sqlmigrate.driver import SyncDriverAdapterBase

__all__ = ("BaseMigrationTracker", "MigrationResult", "MigrationStatus", "RanMigration")


class RanMigration(NamedTuple):
    """One ledger row: an up migration that has run, and the batch it ran in."""

    filename: str
    batch: int


class MigrationResult(NamedTuple):
    """Outcome of a top-level migration command."""

    num_ran: int
    """Number of migration scripts that executed successfully."""
    batch_number: int
    """Batch the command affected; ``0`` for a full revert."""


@dataclass
class MigrationStatus:
    """Snapshot of the ledger alongside the migrations still waiting to run."""

    ran: "list[RanMigration]" = field(default_factory=list)
    pending: "list[str]" = field(default_factory=list)

    @property
    def last_batch(self) -> int:
        return max((entry.batch for entry in self.ran), default=0)

    @property
    def is_up_to_date(self) -> bool:
        return not self.pending


class BaseMigrationTracker:
    """Builds the SQL the ledger runs, for any driver.

    The ledger is a two column table: ``filename`` holds the up migration's
    file name, ``batch`` the number of the run that applied it. The batch is
    always supplied explicitly, even on backends where the column type
    auto-increments.
    """

    __slots__ = ("version_table",)

    def __init__(self, version_table_name: str = DEFAULT_VERSION_TABLE) -> None:
        self.version_table = version_table_name

    def _table(self, driver: "SyncDriverAdapterBase") -> str:
        return driver.data_dictionary.quote_identifier(self.version_table)

    def _get_create_table_sql(self, driver: "SyncDriverAdapterBase") -> str:
        return (
            f"CREATE TABLE IF NOT EXISTS {self._table(driver)} ("
            f"filename VARCHAR(255) NOT NULL, batch {driver.batch_column_type})"
        )

    def _get_ran_migrations_sql(self, driver: "SyncDriverAdapterBase") -> str:
        return f"SELECT filename, batch FROM {self._table(driver)} ORDER BY batch DESC, filename DESC"

    def _get_migrations_for_batch_sql(self, driver: "SyncDriverAdapterBase") -> str:
        p = driver.parameter_placeholder
        return f"SELECT filename FROM {self._table(driver)} WHERE batch = {p} ORDER BY filename DESC"

    def _get_last_batch_sql(self, driver: "SyncDriverAdapterBase") -> str:
        return f"SELECT MAX(batch) FROM {self._table(driver)}"

    def _get_record_migration_sql(self, driver: "SyncDriverAdapterBase") -> str:
        p = driver.parameter_placeholder
        return f"INSERT INTO {self._table(driver)} (filename, batch) VALUES ({p}, {p})"

    def _get_remove_migration_sql(self, driver: "SyncDriverAdapterBase") -> str:
        p = driver.parameter_placeholder
        return f"DELETE FROM {self._table(driver)} WHERE filename = {p} AND batch = {p}"
