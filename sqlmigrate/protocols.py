"""Runtime-checkable protocols for the capabilities the migration engine consumes.

The migration engine is written against these protocols rather than concrete
backends, so a driver or a file store can be swapped without touching the
reconciliation logic.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

__all__ = (
    "DatabaseExecutorProtocol",
    "FileStoreProtocol",
    "SchemaIntrospectorProtocol",
)


@runtime_checkable
class DatabaseExecutorProtocol(Protocol):
    """Protocol for objects that can run SQL against an open connection."""

    dialect: str
    parameter_placeholder: str
    batch_column_type: str

    def execute(self, sql: str, *parameters: Any) -> None:
        """Execute a statement that returns no rows."""
        ...

    def select(self, sql: str, *parameters: Any) -> "list[tuple[Any, ...]]":
        """Execute a query and return every row."""
        ...

    def select_value_or_none(self, sql: str, *parameters: Any) -> Optional[Any]:
        """Execute a query and return the first column of the first row, if any."""
        ...

    def close(self) -> None:
        """Release the underlying connection."""
        ...


@runtime_checkable
class FileStoreProtocol(Protocol):
    """Protocol for the file store migration scripts are read from."""

    def list_objects_sync(self, suffix: str = "") -> "list[str]":
        """List the names of files directly inside the store that end with ``suffix``."""
        ...

    def read_text_sync(self, path: "str | Path", encoding: str = "utf-8") -> str:
        """Read a file as text."""
        ...

    def exists_sync(self, path: "str | Path") -> bool:
        """Check whether a file exists."""
        ...


@runtime_checkable
class SchemaIntrospectorProtocol(Protocol):
    """Protocol for backend specific table introspection used by schema dumps."""

    def get_tables(self, driver: Any, database: str, exclude: "tuple[str, ...]" = ()) -> Iterator[str]:
        """Yield the names of all tables in ``database``."""
        ...

    def get_create_for_table(self, driver: Any, table: str, database: str = "") -> str:
        """Return the statement that creates ``table``."""
        ...

    def get_drop_for_table(self, driver: Any, table: str, database: str = "") -> str:
        """Return the statement that drops ``table``."""
        ...
