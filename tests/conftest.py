from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from flask.testing import FlaskClient

from sipswp.app import create_app
from sipswp.config import Settings
from sipswp.storage.kv import InMemoryStorage, StorageError


class FailingStorage(InMemoryStorage):
    """In-memory storage that can be told to fail on any operation."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_get = False
        self.fail_set = False
        self.fail_remove = False

    def get(self, key: str) -> Optional[str]:
        if self.fail_get:
            raise StorageError("get unavailable")
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise StorageError("set unavailable")
        super().set(key, value)

    def remove(self, key: str) -> None:
        if self.fail_remove:
            raise StorageError("remove unavailable")
        super().remove(key)


class SteppingClock:
    """Deterministic clock advancing a fixed step on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        moment = self.current
        self.current = self.current + self.step
        return moment


@pytest.fixture()
def storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture()
def clock() -> SteppingClock:
    return SteppingClock(datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc))


@pytest.fixture()
def app(storage: FailingStorage):
    settings = Settings(LOG_LEVEL="DEBUG", CORS_ORIGIN_URLS="http://localhost:5173")
    return create_app(settings=settings, storage=storage)


@pytest.fixture()
def client(app) -> FlaskClient:
    with app.test_client() as test_client:
        yield test_client
