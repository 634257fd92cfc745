"""Discovery and reading of migration script files."""

from typing import TYPE_CHECKING, Optional

from sqlmigrate.storage.backends.local import LocalStore
from sqlmigrate.utils.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from sqlmigrate.protocols import FileStoreProtocol

__all__ = ("DOWN_SUFFIX", "UP_SUFFIX", "MigrationFileCatalog", "split_sql_statements")

logger = get_logger("migrations.loader")

UP_SUFFIX = ".up.sql"
DOWN_SUFFIX = ".down.sql"
STATEMENT_SEPARATOR = ";"


def split_sql_statements(content: str) -> "list[str]":
    """Split a migration script into statements.

    The script is split on every ``;``. Each piece is trimmed and empty pieces
    are dropped; the remaining statements keep their file order.

    Args:
        content: Full text of a migration file.

    Returns:
        The statements to execute, in order.
    """
    return [statement.strip() for statement in content.split(STATEMENT_SEPARATOR) if statement.strip()]


class MigrationFileCatalog:
    """The migration scripts available in one directory.

    Scripts come in pairs, ``{name}.up.sql`` and an optional ``{name}.down.sql``.
    The catalog only looks at files directly inside the directory.
    """

    __slots__ = ("migrations_path", "store")

    def __init__(self, migrations_path: "str | Path", store: "Optional[FileStoreProtocol]" = None) -> None:
        self.migrations_path = str(migrations_path)
        self.store = store if store is not None else LocalStore(self.migrations_path)

    def list_candidates(self, suffix: str = UP_SUFFIX) -> "set[str]":
        """List the migration file names ending with ``suffix``.

        Raises:
            MigrationFileError: If the directory does not exist or cannot be read.

        Returns:
            A set of file names.
        """
        candidates = set(self.store.list_objects_sync(suffix))
        logger.debug("Found %d %s files in %s", len(candidates), suffix, self.migrations_path)
        return candidates

    def read_migration(self, filename: str) -> str:
        """Read a migration script.

        Raises:
            MigrationFileError: If the file is missing or unreadable.
        """
        return self.store.read_text_sync(filename)

    def has_migration(self, filename: str) -> bool:
        return self.store.exists_sync(filename)

    @staticmethod
    def down_filename_for(up_filename: str) -> str:
        """Map ``name.up.sql`` to its ``name.down.sql`` partner."""
        return up_filename[: -len(UP_SUFFIX)] + DOWN_SUFFIX
