"""PostgreSQL adapter for SQLMigrate, built on psycopg 3."""

from sqlmigrate.exceptions import MissingDependencyError

try:
    import psycopg  # noqa: F401
except ImportError as e:
    raise MissingDependencyError(package="psycopg") from e

from sqlmigrate.adapters.psycopg.config import PsycopgConfig, PsycopgConnectionParams  # noqa: E402
from sqlmigrate.adapters.psycopg.data_dictionary import PsycopgDataDictionary  # noqa: E402
from sqlmigrate.adapters.psycopg.driver import PsycopgConnection, PsycopgCursor, PsycopgDriver  # noqa: E402

__all__ = (
    "PsycopgConfig",
    "PsycopgConnection",
    "PsycopgConnectionParams",
    "PsycopgCursor",
    "PsycopgDataDictionary",
    "PsycopgDriver",
)
