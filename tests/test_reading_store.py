"""Unit tests for the bounded reading store."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from datastore.reading_store import ReadingStore
from models.records import Reading


def _reading(reading_id: int, angle: float = 0.0) -> Reading:
    return Reading(
        id=reading_id,
        time_occurred=f"t{reading_id}",
        angle=angle,
        received_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def _stamp(angle: float):
    return lambda reading_id, received_at: Reading(
        id=reading_id, time_occurred=f"t{reading_id}", angle=angle, received_at=received_at
    )


def test_new_store_is_empty() -> None:
    store = ReadingStore(capacity=3)

    assert store.count() == 0
    assert store.list() == []
    assert store.latest() is None


@pytest.mark.parametrize("capacity", [0, -1, 2.5, True])
def test_rejects_invalid_capacity(capacity) -> None:
    with pytest.raises(ValueError):
        ReadingStore(capacity=capacity)


def test_insert_keeps_newest_first() -> None:
    store = ReadingStore(capacity=5)

    for reading_id in (1, 2, 3):
        store.insert(_reading(reading_id))

    assert [reading.id for reading in store.list()] == [3, 2, 1]
    assert store.latest().id == 3  # type: ignore[union-attr]


def test_insert_past_capacity_evicts_oldest() -> None:
    store = ReadingStore(capacity=3)

    for reading_id in range(1, 8):
        store.insert(_reading(reading_id))

    assert store.count() == 3
    assert [reading.id for reading in store.list()] == [7, 6, 5]


def test_list_returns_isolated_snapshot() -> None:
    store = ReadingStore(capacity=3)
    store.insert(_reading(1))
    snapshot = store.list()

    store.insert(_reading(2))
    snapshot.clear()

    assert store.count() == 2
    assert [reading.id for reading in store.list()] == [2, 1]


def test_returned_readings_do_not_change_after_later_inserts() -> None:
    store = ReadingStore(capacity=1)
    store.insert(_reading(1, angle=10.0))
    first = store.latest()

    store.insert(_reading(2, angle=20.0))

    assert first is not None
    assert first.id == 1
    assert first.angle == 10.0
    with pytest.raises(AttributeError):
        first.angle = 99.0  # type: ignore[misc]


def test_insert_with_assigns_increasing_ids_and_receipt_times() -> None:
    store = ReadingStore(capacity=10)

    created = [store.insert_with(_stamp(float(index))) for index in range(5)]

    assert [reading.id for reading in created] == [1, 2, 3, 4, 5]
    received = [reading.received_at for reading in created]
    assert received == sorted(received)
    assert all(stamp.tzinfo is not None for stamp in received)
    assert store.list() == list(reversed(created))


def test_concurrent_inserts_stay_bounded_and_ordered() -> None:
    store = ReadingStore(capacity=100)
    barrier = threading.Barrier(150)

    def worker(index: int) -> None:
        barrier.wait(timeout=5)
        store.insert_with(_stamp(float(index)))

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(150)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    readings = store.list()
    ids = [reading.id for reading in readings]
    assert store.count() == 100
    assert len(set(ids)) == 100
    assert ids == list(range(150, 50, -1))


def test_receipt_time_never_goes_backwards(monkeypatch) -> None:
    ticks = iter(
        [
            datetime(2024, 1, 1, 12, 0, 5, tzinfo=timezone.utc),
            datetime(2024, 1, 1, 12, 0, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 1, 12, 0, 9, tzinfo=timezone.utc),
        ]
    )

    class SteppingClock:
        @staticmethod
        def now(tz=None):
            return next(ticks)

    monkeypatch.setattr("datastore.reading_store.datetime", SteppingClock)
    store = ReadingStore(capacity=5)

    first, second, third = (store.insert_with(_stamp(0.0)) for _ in range(3))

    assert first.received_at == datetime(2024, 1, 1, 12, 0, 5, tzinfo=timezone.utc)
    assert second.received_at == first.received_at
    assert third.received_at == datetime(2024, 1, 1, 12, 0, 9, tzinfo=timezone.utc)
