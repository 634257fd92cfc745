from typing import Any, Optional

__all__ = (
    "DatabaseConnectionError",
    "ImproperConfigurationError",
    "LedgerError",
    "MigrationFileError",
    "MissingDependencyError",
    "SQLMigrateError",
    "StatementExecutionError",
)


class SQLMigrateError(Exception):
    """Root of every error SQLMigrate raises.

    The first argument becomes ``detail`` unless ``detail`` is passed explicitly.
    """

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class MissingDependencyError(SQLMigrateError, ImportError):
    """A database driver needed by an adapter is not installed."""

    def __init__(self, package: str, install_package: Optional[str] = None) -> None:
        super().__init__(
            f"Package {package!r} is not installed but required. You can install it by running "
            f"'pip install sqlmigrate[{install_package or package}]' to install sqlmigrate with the required extra "
            f"or 'pip install {install_package or package}' to install the package separately",
        )


class ImproperConfigurationError(SQLMigrateError):
    """A database or migration configuration cannot be used as given."""


class DatabaseConnectionError(SQLMigrateError):
    """The database connection could not be opened or was lost."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Could not connect to the database."
        super().__init__(message)


class MigrationFileError(SQLMigrateError, OSError):
    """A migration directory or file is missing or unreadable."""

    path: Optional[str]

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        detail_message = message
        if path:
            detail_message = f"{message}: {path}"
        super().__init__(detail=detail_message)
        self.path = path


class StatementExecutionError(SQLMigrateError):
    """A SQL statement failed while it was being executed."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with optional SQL context."""
        super().__init__(detail=message)
        self.sql = sql


class LedgerError(SQLMigrateError):
    """Writing to or reading from the migrations ledger table failed."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Issues updating the migrations ledger."
        super().__init__(message)
