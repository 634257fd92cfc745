import contextlib
import sqlite3
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from sqlmigrate.adapters.sqlite.data_dictionary import SqliteDataDictionary
from sqlmigrate.driver import SyncDriverAdapterBase
from sqlmigrate.exceptions import DatabaseConnectionError, StatementExecutionError

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = ("SqliteConnection", "SqliteCursor", "SqliteDriver")

SqliteConnection = sqlite3.Connection


class SqliteCursor:
    """Context manager for SQLite cursor management."""

    def __init__(self, connection: "SqliteConnection") -> None:
        self.connection = connection
        self.cursor: Optional[sqlite3.Cursor] = None

    def __enter__(self) -> "sqlite3.Cursor":
        self.cursor = self.connection.cursor()
        return self.cursor

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.cursor is not None:
            with contextlib.suppress(sqlite3.Error):
                self.cursor.close()


class SqliteDriver(SyncDriverAdapterBase["SqliteConnection"]):
    """Synchronous SQLite driver."""

    dialect: "ClassVar[str]" = "sqlite"
    parameter_placeholder: "ClassVar[str]" = "?"
    batch_column_type: "ClassVar[str]" = "INTEGER"

    _data_dictionary = SqliteDataDictionary()

    def with_cursor(self, connection: "SqliteConnection") -> "SqliteCursor":
        return SqliteCursor(connection)

    @property
    def data_dictionary(self) -> "SqliteDataDictionary":
        return self._data_dictionary

    @contextmanager
    def handle_database_exceptions(self) -> "Generator[None, None, None]":
        """Handle SQLite-specific exceptions and wrap them appropriately."""
        try:
            yield
        except sqlite3.ProgrammingError as e:
            if "closed" in str(e).lower():
                msg = f"SQLite connection is closed: {e}"
                raise DatabaseConnectionError(msg) from e
            msg = f"SQLite database error: {e}"
            raise StatementExecutionError(msg) from e
        except sqlite3.Error as e:
            msg = f"SQLite database error: {e}"
            raise StatementExecutionError(msg) from e

    def _close_connection(self) -> None:
        self.connection.close()
