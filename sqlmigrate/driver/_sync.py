"""Synchronous driver protocol implementation."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional, TypeVar

from sqlmigrate.utils.logging import get_logger

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from sqlmigrate.driver._data_dictionary import SyncDataDictionaryBase

logger = get_logger("driver")

__all__ = ("ConnectionT", "SyncDriverAdapterBase")

ConnectionT = TypeVar("ConnectionT")


class SyncDriverAdapterBase(ABC, Generic[ConnectionT]):
    """Base class for synchronous database drivers.

    A driver wraps one open DB-API connection. ``execute``, ``select`` and
    ``select_value_or_none`` orchestrate cursor handling and error translation;
    concrete adapters provide the cursor, the error mapping and the data
    dictionary for their backend.
    """

    __slots__ = ("_closed", "connection")

    dialect: "ClassVar[str]"
    parameter_placeholder: "ClassVar[str]" = "?"
    batch_column_type: "ClassVar[str]" = "INTEGER"

    def __init__(self, connection: ConnectionT) -> None:
        self.connection = connection
        self._closed = False

    @abstractmethod
    def with_cursor(self, connection: ConnectionT) -> "AbstractContextManager[Any]":
        """Create and return a context manager for cursor acquisition and cleanup."""

    @abstractmethod
    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Return a context manager translating backend errors into SQLMigrate errors.

        Connection failures become :class:`~sqlmigrate.exceptions.DatabaseConnectionError`,
        everything else the backend raises becomes
        :class:`~sqlmigrate.exceptions.StatementExecutionError`.
        """

    @property
    @abstractmethod
    def data_dictionary(self) -> "SyncDataDictionaryBase[Any]":
        """Table introspection helpers for this backend."""

    @abstractmethod
    def _close_connection(self) -> None:
        """Close the underlying connection."""

    @staticmethod
    def _execute_on_cursor(cursor: Any, sql: str, parameters: "tuple[Any, ...]") -> None:
        if parameters:
            cursor.execute(sql, parameters)
        else:
            cursor.execute(sql)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def execute(self, sql: str, *parameters: Any) -> None:
        """Execute a single statement that returns no rows.

        Args:
            sql: The statement to execute.
            *parameters: Positional parameters bound to the statement placeholders.
        """
        logger.debug("Executing: %s", sql)
        with self.handle_database_exceptions(), self.with_cursor(self.connection) as cursor:
            self._execute_on_cursor(cursor, sql, parameters)

    def select(self, sql: str, *parameters: Any) -> "list[tuple[Any, ...]]":
        """Execute a query and return every row as a tuple.

        Rows are fully fetched before returning, so callers may modify the
        queried table while iterating the result.

        Args:
            sql: The query to execute.
            *parameters: Positional parameters bound to the query placeholders.

        Returns:
            The fetched rows.
        """
        with self.handle_database_exceptions(), self.with_cursor(self.connection) as cursor:
            self._execute_on_cursor(cursor, sql, parameters)
            return [tuple(row) for row in cursor.fetchall()]

    def select_value_or_none(self, sql: str, *parameters: Any) -> Optional[Any]:
        """Execute a query and return the first column of the first row.

        Returns:
            The value, or ``None`` when the query returned no rows.
        """
        rows = self.select(sql, *parameters)
        if not rows:
            return None
        return rows[0][0]

    def close(self) -> None:
        """Close the connection. Calling it more than once is a no-op."""
        if self._closed:
            return
        self._close_connection()
        self._closed = True
