from sqlmigrate.storage.backends.local import LocalStore

__all__ = ("LocalStore",)
