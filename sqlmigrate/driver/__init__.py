"""Driver abstraction the migration engine is written against."""

from sqlmigrate.driver._data_dictionary import SyncDataDictionaryBase
from sqlmigrate.driver._sync import SyncDriverAdapterBase

__all__ = ("SyncDataDictionaryBase", "SyncDriverAdapterBase")
