"""Table introspection base used to build schema snapshots."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import ClassVar, Generic, TypeVar

from sqlglot import exp

__all__ = ("SyncDataDictionaryBase",)

DriverT = TypeVar("DriverT")


class SyncDataDictionaryBase(ABC, Generic[DriverT]):
    """Backend specific table listing and DDL extraction.

    Every method takes a ``database`` argument naming the schema to look in.
    An empty string means the backend's ``default_schema``.
    """

    __slots__ = ()

    dialect: "ClassVar[str]"
    default_schema: "ClassVar[str]"

    @abstractmethod
    def get_tables(self, driver: DriverT, database: str, exclude: "tuple[str, ...]" = ()) -> Iterator[str]:
        """Yield the table names in ``database``, skipping any listed in ``exclude``.

        The underlying query runs again every time the returned iterator is created.
        """

    @abstractmethod
    def get_create_for_table(self, driver: DriverT, table: str, database: str = "") -> str:
        """Return the statement that recreates ``table`` from ``database``."""

    def get_drop_for_table(self, driver: DriverT, table: str, database: str = "") -> str:
        """Return the statement that drops ``table`` if it exists.

        Tables outside the default schema are schema qualified.
        """
        return f"DROP TABLE IF EXISTS {self.quote_table(table, database).sql(dialect=self.dialect)};"

    def resolve_schema(self, database: str) -> str:
        return database or self.default_schema

    def quote_table(self, table: str, database: str = "") -> exp.Table:
        schema = self.resolve_schema(database)
        return exp.Table(
            this=exp.to_identifier(table, quoted=True),
            db=exp.to_identifier(schema, quoted=True) if schema != self.default_schema else None,
        )

    def quote_identifier(self, name: str) -> str:
        return exp.to_identifier(name, quoted=True).sql(dialect=self.dialect)
