"""SQLite adapter for SQLMigrate."""

from sqlmigrate.adapters.sqlite.config import SqliteConfig, SqliteConnectionParams
from sqlmigrate.adapters.sqlite.data_dictionary import SqliteDataDictionary
from sqlmigrate.adapters.sqlite.driver import SqliteConnection, SqliteCursor, SqliteDriver

__all__ = (
    "SqliteConfig",
    "SqliteConnection",
    "SqliteConnectionParams",
    "SqliteCursor",
    "SqliteDataDictionary",
    "SqliteDriver",
)
