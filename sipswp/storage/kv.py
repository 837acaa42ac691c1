"""Key-value blob storage used to persist calculation history."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol, Union


class StorageError(RuntimeError):
    """Raised by a storage backend when a get/set/remove cannot be completed."""


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryStorage:
    """Dict-backed storage; state lives only as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SQLiteStorage:
    """
    Single-table key-value store in a sqlite file.

    Every call opens and closes its own connection, so an instance can be
    shared freely. Any sqlite failure surfaces as StorageError.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as exc:
            raise StorageError(f"cannot open {self.path}: {exc}") from exc
        if not self._initialized:
            try:
                conn.execute(
                    """
                    create table if not exists kv_store (
                        key text primary key,
                        value text not null,
                        updated_at text not null
                    )
                    """
                )
                conn.commit()
            except sqlite3.Error as exc:
                conn.close()
                raise StorageError(f"cannot initialise {self.path}: {exc}") from exc
            self._initialized = True
        return conn

    def get(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute(
                "select value from kv_store where key = ?",
                (key,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"get {key!r} failed: {exc}") from exc
        finally:
            conn.close()
        return None if row is None else row[0]

    def set(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                insert into kv_store (key, value, updated_at)
                values (?, ?, ?)
                on conflict(key) do update set
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(timezone.utc).isoformat(timespec="seconds")),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"set {key!r} failed: {exc}") from exc
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("delete from kv_store where key = ?", (key,))
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"remove {key!r} failed: {exc}") from exc
        finally:
            conn.close()


__all__ = [
    "StorageError",
    "KeyValueStorage",
    "InMemoryStorage",
    "SQLiteStorage",
]
