"""File storage used to read migration scripts."""

from sqlmigrate.storage.backends.local import LocalStore

__all__ = ("LocalStore",)
