"""SQLite-specific data dictionary for schema snapshots."""

from collections.abc import Iterator
from typing import TYPE_CHECKING, ClassVar

from sqlmigrate.driver import SyncDataDictionaryBase
from sqlmigrate.exceptions import StatementExecutionError
from sqlmigrate.utils.logging import get_logger

logger = get_logger("adapters.sqlite.data_dictionary")

__all__ = ("SqliteDataDictionary",)

if TYPE_CHECKING:
    from sqlmigrate.adapters.sqlite.driver import SqliteDriver


class SqliteDataDictionary(SyncDataDictionaryBase["SqliteDriver"]):
    """SQLite-specific sync data dictionary.

    ``database`` is the schema name of an attached database; ``main`` is the
    primary database file.
    """

    __slots__ = ()

    dialect: "ClassVar[str]" = "sqlite"
    default_schema: "ClassVar[str]" = "main"

    def get_tables(self, driver: "SqliteDriver", database: str, exclude: "tuple[str, ...]" = ()) -> Iterator[str]:
        """Yield user table names, skipping SQLite's internal ``sqlite_*`` tables."""
        schema = self.quote_identifier(self.resolve_schema(database))
        rows = driver.select(
            f"SELECT name FROM {schema}.sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        for (name,) in rows:
            if name not in exclude:
                yield name

    def get_create_for_table(self, driver: "SqliteDriver", table: str, database: str = "") -> str:
        """Return the ``CREATE TABLE`` text SQLite stored for ``table`` in ``database``.

        Raises:
            StatementExecutionError: If the table does not exist in that schema.
        """
        schema = self.resolve_schema(database)
        create_sql = driver.select_value_or_none(
            f"SELECT sql FROM {self.quote_identifier(schema)}.sqlite_master WHERE type = 'table' AND name = ?", table
        )
        if create_sql is None:
            msg = f"Table {table!r} does not exist in {schema!r}"
            raise StatementExecutionError(msg)
        logger.debug("Fetched create statement for %s", table)
        return str(create_sql)
