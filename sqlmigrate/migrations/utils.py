"""Utility functions for migration scripts."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlmigrate.exceptions import MigrationFileError
from sqlmigrate.migrations.loader import DOWN_SUFFIX, UP_SUFFIX
from sqlmigrate.storage.backends.local import LocalStore
from sqlmigrate.utils.text import slugify

__all__ = ("create_migration_file", "generate_timestamp_version")


def generate_timestamp_version(now: Optional[datetime] = None) -> str:
    """Generate a ``YYYYMMDDHHmmss`` version string in UTC.

    Timestamps sort lexicographically in creation order, which is the order
    pending migrations run in.
    """
    moment = now if now is not None else datetime.now(timezone.utc)
    return moment.strftime("%Y%m%d%H%M%S")


def create_migration_file(
    migrations_dir: "str | Path",
    name: str,
    *,
    version: Optional[str] = None,
    store: "Optional[LocalStore]" = None,
) -> "tuple[Path, Path]":
    """Create an empty up/down migration pair.

    An up file left empty is skipped by the runner until it is filled in.

    Args:
        migrations_dir: Directory to create the files in. Created if missing.
        name: Free text description, slugified into the file name.
        version: Version prefix. Defaults to the current UTC timestamp.
        store: Store to write through. Defaults to a ``LocalStore`` on ``migrations_dir``.

    Raises:
        MigrationFileError: If the name is empty after slugifying, a file of
            the same name already exists, or the files cannot be written.

    Returns:
        The paths of the ``.up.sql`` and ``.down.sql`` files.
    """
    slug = slugify(name, separator="_")
    if not slug:
        msg = f"Migration name {name!r} does not contain any usable characters"
        raise MigrationFileError(msg)

    prefix = f"{version or generate_timestamp_version()}_{slug}"
    up_filename = f"{prefix}{UP_SUFFIX}"
    down_filename = f"{prefix}{DOWN_SUFFIX}"

    target = store if store is not None else LocalStore(str(migrations_dir))
    for filename in (up_filename, down_filename):
        if target.exists_sync(filename):
            msg = "Migration file already exists"
            raise MigrationFileError(msg, path=str(target.base_path / filename))

    target.write_text_sync(up_filename, "")
    target.write_text_sync(down_filename, "")
    return target.base_path / up_filename, target.base_path / down_filename
