from sipswp.storage.kv import InMemoryStorage, KeyValueStorage, SQLiteStorage, StorageError

__all__ = ["InMemoryStorage", "KeyValueStorage", "SQLiteStorage", "StorageError"]
