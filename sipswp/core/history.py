from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, List, Literal, Optional, Union

from pydantic import BaseModel, ValidationError

from sipswp.schemas.history import (
    CalculationRecord,
    SIPParams,
    SIPResults,
    SWPParams,
    SWPResults,
    record_adapter,
)
from sipswp.storage.kv import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "calculationHistory"


class HistoryStorageError(RuntimeError):
    """The storage backend failed while reading, writing or clearing history."""

    def __init__(self, action: str, cause: Optional[BaseException] = None):
        super().__init__(f"history {action} failed" + (f": {cause}" if cause else ""))
        self.action = action


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HistoryStore:
    """
    Append-only, newest-first log of calculations kept as one JSON array
    under a single storage key.

    The persisted blob is the only source of truth; nothing is cached.
    append() is a read-modify-write of the whole array, serialized by a lock
    so two appends through the same store never drop each other's record.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_HISTORY_KEY,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.storage = storage
        self.key = key
        self.clock = clock
        self._lock = threading.Lock()

    def _load_items(self) -> List[Any]:
        """Raw array entries as stored. Missing, unparseable or non-array blobs give []."""
        try:
            raw = self.storage.get(self.key)
        except StorageError as exc:
            logger.error("Reading history key %r failed", self.key, exc_info=True)
            raise HistoryStorageError("read", exc) from exc

        if raw is None:
            return []

        try:
            items = json.loads(raw)
        except ValueError:
            logger.warning("History under %r is not valid JSON; treating as empty", self.key)
            return []
        if not isinstance(items, list):
            logger.warning("History under %r is not a list; treating as empty", self.key)
            return []
        return items

    def _next_id(self, items: List[Any], moment: datetime) -> str:
        candidate = int(moment.timestamp() * 1000)
        head_id = items[0].get("id") if items and isinstance(items[0], dict) else None
        if isinstance(head_id, str) and head_id.isdigit():
            candidate = max(candidate, int(head_id) + 1)
        return str(candidate)

    def read_all(self) -> List[CalculationRecord]:
        """
        Every stored record, newest first. Missing or corrupt history reads as [].

        Entries that do not parse as a record are skipped here but stay in storage.
        """
        records: List[CalculationRecord] = []
        for index, item in enumerate(self._load_items()):
            try:
                records.append(record_adapter.validate_python(item))
            except ValidationError:
                logger.warning("Skipping malformed history entry at position %d", index)
        return records

    def append(
        self,
        record_type: Literal["SIP", "SWP"],
        params: Union[SIPParams, SWPParams, dict],
        results: Union[SIPResults, SWPResults, dict],
    ) -> CalculationRecord:
        """Stamp a new record and persist it at the head of the log.

        Existing entries are written back verbatim, including ones this
        version cannot parse.
        """
        with self._lock:
            items = self._load_items()
            moment = self.clock()
            record = record_adapter.validate_python(
                {
                    "id": self._next_id(items, moment),
                    "type": record_type,
                    "date": _iso_timestamp(moment),
                    "params": _as_dict(params),
                    "results": _as_dict(results),
                }
            )
            items.insert(0, record_adapter.dump_python(record, mode="json"))

            try:
                self.storage.set(self.key, json.dumps(items))
            except StorageError as exc:
                logger.error("Saving %s calculation failed", record_type, exc_info=True)
                raise HistoryStorageError("write", exc) from exc

        logger.info("Saved %s calculation %s (%d in history)", record_type, record.id, len(items))
        return record

    def clear(self) -> None:
        with self._lock:
            try:
                self.storage.remove(self.key)
            except StorageError as exc:
                logger.error("Clearing history key %r failed", self.key, exc_info=True)
                raise HistoryStorageError("clear", exc) from exc
        logger.info("Cleared calculation history")


def _as_dict(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return value


__all__ = [
    "DEFAULT_HISTORY_KEY",
    "HistoryStorageError",
    "HistoryStore",
]
