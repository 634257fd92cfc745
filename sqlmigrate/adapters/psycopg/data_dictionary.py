"""PostgreSQL-specific data dictionary for schema snapshots."""

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, ClassVar

from sqlmigrate.driver import SyncDataDictionaryBase
from sqlmigrate.exceptions import StatementExecutionError
from sqlmigrate.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlmigrate.adapters.psycopg.driver import PsycopgDriver

logger = get_logger("adapters.psycopg.data_dictionary")

__all__ = ("PsycopgDataDictionary",)

_SEQUENCE_DEFAULT_RE = re.compile(r"^nextval\('[^']+'::regclass\)$")
_SERIAL_TYPES = {"smallint": "smallserial", "integer": "serial", "bigint": "bigserial"}

_TABLES_SQL = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = %s AND table_type = 'BASE TABLE' ORDER BY table_name"
)
_COLUMNS_SQL = (
    "SELECT column_name, data_type, character_maximum_length, is_nullable, column_default "
    "FROM information_schema.columns "
    "WHERE table_schema = %s AND table_name = %s ORDER BY ordinal_position"
)
_PRIMARY_KEY_SQL = (
    "SELECT kcu.column_name FROM information_schema.table_constraints tc "
    "JOIN information_schema.key_column_usage kcu "
    "ON tc.constraint_name = kcu.constraint_name AND tc.table_schema = kcu.table_schema "
    "WHERE tc.constraint_type = 'PRIMARY KEY' AND tc.table_schema = %s AND tc.table_name = %s "
    "ORDER BY kcu.ordinal_position"
)


class PsycopgDataDictionary(SyncDataDictionaryBase["PsycopgDriver"]):
    """PostgreSQL-specific sync data dictionary.

    ``database`` is the schema to list tables from, usually ``public``.
    PostgreSQL has no ``SHOW CREATE TABLE``, so create statements are rebuilt
    from ``information_schema``.
    """

    __slots__ = ()

    dialect: "ClassVar[str]" = "postgres"
    default_schema: "ClassVar[str]" = "public"

    def get_tables(self, driver: "PsycopgDriver", database: str, exclude: "tuple[str, ...]" = ()) -> Iterator[str]:
        for (name,) in driver.select(_TABLES_SQL, self.resolve_schema(database)):
            if name not in exclude:
                yield name

    def get_create_for_table(self, driver: "PsycopgDriver", table: str, database: str = "") -> str:
        """Rebuild the ``CREATE TABLE`` statement for ``table`` in schema ``database``.

        Columns backed by a sequence default are rendered as ``serial`` types so
        the statement does not depend on the sequence existing.

        Raises:
            StatementExecutionError: If the table has no columns in that schema.
        """
        schema = self.resolve_schema(database)
        columns = driver.select(_COLUMNS_SQL, schema, table)
        if not columns:
            msg = f"Table {table!r} does not exist in {schema!r}"
            raise StatementExecutionError(msg)
        definitions = [self._column_definition(*column) for column in columns]
        primary_key = [row[0] for row in driver.select(_PRIMARY_KEY_SQL, schema, table)]
        if primary_key:
            definitions.append(f"PRIMARY KEY ({', '.join(self.quote_identifier(c) for c in primary_key)})")
        body = ",\n    ".join(definitions)
        logger.debug("Rebuilt create statement for %s from %d columns", table, len(columns))
        return f"CREATE TABLE {self.quote_table(table, database).sql(dialect=self.dialect)} (\n    {body}\n)"

    def _column_definition(
        self, name: str, data_type: str, max_length: "Any", is_nullable: str, default: "Any"
    ) -> str:
        column_type = data_type
        if default is not None and _SEQUENCE_DEFAULT_RE.match(str(default)) and data_type in _SERIAL_TYPES:
            column_type = _SERIAL_TYPES[data_type]
            default = None
        elif max_length is not None:
            column_type = f"{data_type}({max_length})"
        parts = [self.quote_identifier(name), column_type]
        if is_nullable == "NO":
            parts.append("NOT NULL")
        if default is not None:
            parts.append(f"DEFAULT {default}")
        return " ".join(parts)
