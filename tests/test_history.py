from __future__ import annotations

import json
import threading
from datetime import datetime, timezone

import pytest

from sipswp.core.history import HistoryStorageError, HistoryStore
from sipswp.schemas.history import SIPParams, SIPRecord, SIPResults, SWPParams, SWPRecord, SWPResults

KEY = "calculationHistory"


def sip_params(monthly: float = 5000) -> SIPParams:
    return SIPParams(monthlyInvestment=monthly, returnRate=12, duration=10, inflationRate=6)


def sip_results() -> SIPResults:
    return SIPResults(totalInvestment=600_000, expectedReturns=550_193, totalValue=1_150_193)


def swp_params() -> SWPParams:
    return SWPParams(initialInvestment=1_000_000, monthlyWithdrawal=10_000, returnRate=12, duration=10)


def swp_results() -> SWPResults:
    return SWPResults(totalWithdrawals=1_200_000, finalBalance=1_000_000)


@pytest.fixture()
def store(storage, clock) -> HistoryStore:
    return HistoryStore(storage, key=KEY, clock=clock)


def test_missing_key_reads_empty(store):
    assert store.read_all() == []


def test_appends_read_back_newest_first(store):
    first = store.append("SIP", sip_params(1000), sip_results())
    second = store.append("SWP", swp_params(), swp_results())
    third = store.append("SIP", sip_params(3000), sip_results())

    records = store.read_all()
    assert [r.id for r in records] == [third.id, second.id, first.id]
    assert isinstance(records[1], SWPRecord)
    assert isinstance(records[0], SIPRecord)
    assert records[0].params.monthlyInvestment == 3000

    store.clear()
    assert store.read_all() == []


def test_clear_is_idempotent(store):
    store.append("SIP", sip_params(), sip_results())
    store.clear()
    store.clear()
    assert store.read_all() == []


def test_record_is_stamped_from_clock(store):
    record = store.append("SIP", sip_params(), sip_results())

    assert record.date == "2024-01-01T09:30:00.000Z"
    assert record.id == str(int(datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc).timestamp() * 1000))


def test_ids_increase_even_when_clock_stands_still(storage):
    frozen = datetime(2024, 6, 1, tzinfo=timezone.utc)
    store = HistoryStore(storage, key=KEY, clock=lambda: frozen)

    ids = [int(store.append("SIP", sip_params(), sip_results()).id) for _ in range(3)]
    assert ids[1] == ids[0] + 1
    assert ids[2] == ids[1] + 1


def test_persisted_blob_is_a_json_array(store, storage):
    store.append("SWP", swp_params(), swp_results())
    store.append("SIP", sip_params(), sip_results())

    blob = json.loads(storage.get(KEY))
    assert isinstance(blob, list)
    assert [entry["type"] for entry in blob] == ["SIP", "SWP"]
    assert blob[1]["params"]["monthlyWithdrawal"] == 10_000
    assert blob[1]["results"]["finalBalance"] == 1_000_000


def test_accepts_plain_dicts(store):
    record = store.append(
        "SWP",
        swp_params().model_dump(),
        {"totalWithdrawals": 1_200_000, "finalBalance": 1_000_000},
    )
    assert isinstance(record, SWPRecord)
    assert record.results.yearlyData == []


@pytest.mark.parametrize("blob", ["not json", "{\"id\": 1}", "42", ""])
def test_corrupt_history_is_treated_as_empty(store, storage, blob):
    # Deliberate leniency: a damaged blob reads as no history rather than an error.
    storage.set(KEY, blob)
    assert store.read_all() == []


def test_append_over_corrupt_history_starts_a_fresh_log(store, storage):
    storage.set(KEY, "[{broken")
    store.append("SIP", sip_params(), sip_results())

    assert len(store.read_all()) == 1


def test_malformed_entries_are_skipped_on_read_and_kept_on_append(store, storage):
    good = store.append("SIP", sip_params(), sip_results())
    blob = json.loads(storage.get(KEY))
    blob.append({"id": "1", "type": "LOAN", "date": "x", "params": {}, "results": {}})
    storage.set(KEY, json.dumps(blob))

    assert [r.id for r in store.read_all()] == [good.id]

    newer = store.append("SWP", swp_params(), swp_results())
    assert [r.id for r in store.read_all()] == [newer.id, good.id]

    stored = json.loads(storage.get(KEY))
    assert [entry["type"] for entry in stored] == ["SWP", "SIP", "LOAN"]
    assert stored[-1] == {"id": "1", "type": "LOAN", "date": "x", "params": {}, "results": {}}


def test_append_keeps_entries_it_cannot_parse(store, storage):
    """Entries from an unknown or newer writer survive every append untouched."""
    foreign = [
        {"id": "9", "type": "SIP", "date": "2023-01-01T00:00:00.000Z", "params": {"monthlyInvestment": "lots"}},
        "not even an object",
    ]
    storage.set(KEY, json.dumps(foreign))

    first = store.append("SIP", sip_params(), sip_results())
    second = store.append("SWP", swp_params(), swp_results())

    stored = json.loads(storage.get(KEY))
    assert stored[2:] == foreign
    assert [entry["id"] for entry in stored[:2]] == [second.id, first.id]
    assert [r.id for r in store.read_all()] == [second.id, first.id]


def test_sip_record_without_inflation_is_read_and_preserved(store, storage):
    legacy = {
        "id": "1700000000000",
        "type": "SIP",
        "date": "2023-11-14T22:13:20.000Z",
        "params": {"monthlyInvestment": 5000, "returnRate": 12, "duration": 10},
        "results": {"totalInvestment": 600_000, "expectedReturns": 550_193, "totalValue": 1_150_193},
    }
    storage.set(KEY, json.dumps([legacy]))

    [record] = store.read_all()
    assert isinstance(record, SIPRecord)
    assert record.params.inflationRate is None

    store.append("SIP", sip_params(), sip_results())
    assert json.loads(storage.get(KEY))[1] == legacy


def test_write_failure_is_reported_and_keeps_previous_log(store, storage):
    kept = store.append("SIP", sip_params(), sip_results())
    before = storage.get(KEY)

    storage.fail_set = True
    with pytest.raises(HistoryStorageError) as excinfo:
        store.append("SWP", swp_params(), swp_results())
    assert excinfo.value.action == "write"

    assert storage.get(KEY) == before
    storage.fail_set = False
    assert [r.id for r in store.read_all()] == [kept.id]


def test_read_failure_is_reported(store, storage):
    storage.fail_get = True
    with pytest.raises(HistoryStorageError):
        store.read_all()
    with pytest.raises(HistoryStorageError):
        store.append("SIP", sip_params(), sip_results())


def test_clear_failure_is_reported(store, storage):
    store.append("SIP", sip_params(), sip_results())
    storage.fail_remove = True

    with pytest.raises(HistoryStorageError) as excinfo:
        store.clear()
    assert excinfo.value.action == "clear"
    assert len(store.read_all()) == 1


def test_concurrent_appends_do_not_lose_records(storage):
    store = HistoryStore(storage, key=KEY)
    barrier = threading.Barrier(8)

    def submit(monthly: float) -> None:
        barrier.wait()
        store.append("SIP", sip_params(monthly), sip_results())

    threads = [threading.Thread(target=submit, args=(1000 + i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    records = store.read_all()
    assert len(records) == 8
    assert sorted(r.params.monthlyInvestment for r in records) == [1000 + i for i in range(8)]
    ids = [int(r.id) for r in records]
    assert ids == sorted(ids, reverse=True)
    assert len(set(ids)) == 8
