"""Reads migration scripts from a directory on the local disk."""

from pathlib import Path
from urllib.parse import unquote, urlparse

from sqlmigrate.exceptions import MigrationFileError
from sqlmigrate.storage.errors import execute_sync_storage_operation

__all__ = ("LocalStore",)


def _list_directory(directory: Path, suffix: str) -> "list[str]":
    """List regular files directly inside ``directory`` ending with ``suffix``."""
    if not directory.exists():
        raise FileNotFoundError(2, "No such file or directory", str(directory))
    if not directory.is_dir():
        raise NotADirectoryError(20, "Not a directory", str(directory))
    return [entry.name for entry in directory.iterdir() if entry.is_file() and entry.name.endswith(suffix)]


class LocalStore:
    """Migration directory on the local file system.

    Accepts a plain path or a ``file://`` URI. The directory is never created
    on read, so listing a missing migration directory raises.
    """

    __slots__ = ("backend_type", "base_path", "protocol")

    def __init__(self, uri: str = "") -> None:
        """Point the store at ``uri``, or at the working directory when empty."""
        if uri.startswith("file://"):
            parsed = urlparse(uri)
            path = unquote(parsed.path)
            if path and len(path) > 2 and path[2] == ":":  # noqa: PLR2004
                path = path[1:]
            self.base_path = Path(path).resolve()
        elif uri:
            self.base_path = Path(uri).resolve()
        else:
            self.base_path = Path.cwd()

        self.protocol = "file"
        self.backend_type = "local"

    def __repr__(self) -> str:
        return f"LocalStore(base_path={str(self.base_path)!r})"

    def _resolve_path(self, path: "str | Path") -> Path:
        """Anchor relative paths at ``base_path``."""
        p = Path(path)
        return p if p.is_absolute() else self.base_path / p

    def read_bytes_sync(self, path: "str | Path") -> bytes:
        """Read a whole file as bytes."""
        resolved = self._resolve_path(path)
        return execute_sync_storage_operation(
            resolved.read_bytes, backend=self.backend_type, operation="read_bytes", path=str(resolved)
        )

    def read_text_sync(self, path: "str | Path", encoding: str = "utf-8") -> str:
        """Read text from file synchronously.

        Raises:
            MigrationFileError: If the file is missing, unreadable or not valid text.
        """
        data = self.read_bytes_sync(path)
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as error:
            msg = f"Could not decode file as {encoding}"
            raise MigrationFileError(msg, path=str(self._resolve_path(path))) from error

    def list_objects_sync(self, suffix: str = "") -> "list[str]":
        """List file names directly inside the base directory.

        Args:
            suffix: Only names ending with this suffix are returned.

        Raises:
            MigrationFileError: If the base directory is missing, not a directory or unreadable.

        Returns:
            Matching file names, in the order the file system returns them.
        """
        return execute_sync_storage_operation(
            lambda: _list_directory(self.base_path, suffix),
            backend=self.backend_type,
            operation="list_objects",
            path=str(self.base_path),
        )

    def exists_sync(self, path: "str | Path") -> bool:
        """Whether ``path`` names a regular file."""
        return self._resolve_path(path).is_file()

    def write_text_sync(self, path: "str | Path", data: str, encoding: str = "utf-8") -> None:
        """Write text to a file, creating parent directories as needed."""
        resolved = self._resolve_path(path)

        def _write() -> None:
            resolved.parent.mkdir(parents=True, exist_ok=True)
            resolved.write_text(data, encoding=encoding)

        execute_sync_storage_operation(_write, backend=self.backend_type, operation="write_text", path=str(resolved))
