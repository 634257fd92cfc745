from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Optional

import psycopg

from sqlmigrate.adapters.psycopg.data_dictionary import PsycopgDataDictionary
from sqlmigrate.driver import SyncDriverAdapterBase
from sqlmigrate.exceptions import DatabaseConnectionError, StatementExecutionError

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = ("PsycopgConnection", "PsycopgCursor", "PsycopgDriver")

PsycopgConnection = psycopg.Connection


class PsycopgCursor:
    """Context manager for psycopg cursor management."""

    def __init__(self, connection: "PsycopgConnection[Any]") -> None:
        self.connection = connection
        self.cursor: Optional[psycopg.Cursor[Any]] = None

    def __enter__(self) -> "psycopg.Cursor[Any]":
        self.cursor = self.connection.cursor()
        return self.cursor

    def __exit__(self, *_: Any) -> None:
        if self.cursor is not None:
            self.cursor.close()


class PsycopgDriver(SyncDriverAdapterBase["PsycopgConnection[Any]"]):
    """Synchronous PostgreSQL driver."""

    dialect: "ClassVar[str]" = "postgres"
    parameter_placeholder: "ClassVar[str]" = "%s"
    batch_column_type: "ClassVar[str]" = "SERIAL"

    _data_dictionary = PsycopgDataDictionary()

    def with_cursor(self, connection: "PsycopgConnection[Any]") -> "PsycopgCursor":
        return PsycopgCursor(connection)

    @property
    def data_dictionary(self) -> "PsycopgDataDictionary":
        return self._data_dictionary

    @contextmanager
    def handle_database_exceptions(self) -> "Generator[None, None, None]":
        """Handle psycopg-specific exceptions and wrap them appropriately."""
        try:
            yield
        except psycopg.OperationalError as e:
            error_msg = str(e).lower()
            if "connect" in error_msg or "closed" in error_msg:
                msg = f"PostgreSQL connection error: {e}"
                raise DatabaseConnectionError(msg) from e
            msg = f"PostgreSQL operational error: {e}"
            raise StatementExecutionError(msg) from e
        except psycopg.Error as e:
            msg = f"PostgreSQL error: {e}"
            raise StatementExecutionError(msg) from e

    def _close_connection(self) -> None:
        self.connection.close()
