"""Translation of file system errors raised by storage backends."""

from typing import Callable, TypeVar

from sqlmigrate.exceptions import MigrationFileError
from sqlmigrate.utils.logging import get_logger

__all__ = ("execute_sync_storage_operation",)

logger = get_logger("storage")

T = TypeVar("T")


def execute_sync_storage_operation(func: "Callable[[], T]", *, backend: str, operation: str, path: str) -> T:
    """Run a storage operation, converting ``OSError`` into :class:`MigrationFileError`.

    Args:
        func: Zero-argument callable performing the operation.
        backend: Backend name, for log context.
        operation: Operation name, for log context.
        path: Path the operation targets.

    Raises:
        MigrationFileError: If the operation raised ``OSError``.

    Returns:
        Whatever ``func`` returns.
    """
    try:
        return func()
    except OSError as error:
        logger.debug("%s storage operation %s failed for %s: %s", backend, operation, path, error)
        msg = f"Could not {operation.replace('_', ' ')} ({error.strerror or error})"
        raise MigrationFileError(msg, path=path) from error
