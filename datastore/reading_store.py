from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from itertools import count as _counter
from threading import Lock
from typing import Callable, Deque, Optional

from models.records import Reading

ReadingFactory = Callable[[int, datetime], Reading]


class ReadingStore:
    """Bounded, newest-first history of readings shared by writers and readers.

    A single lock guards the backing deque, the identifier sequence and the
    last receipt timestamp, so a reader never sees a half-applied insert.
    """

    def __init__(self, capacity: int = 100) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"Store capacity must be a positive integer, got {capacity!r}.")
        self._capacity = capacity
        # appendleft on a bounded deque drops entries from the right (oldest).
        self._readings: Deque[Reading] = deque(maxlen=capacity)
        self._ids = _counter(1)
        self._last_received_at: Optional[datetime] = None
        self._lock = Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def insert(self, reading: Reading) -> None:
        with self._lock:
            self._readings.appendleft(reading)

    def insert_with(self, factory: ReadingFactory) -> Reading:
        """Stamp a new reading with the next id and receipt time, then insert it.

        ``factory`` runs under the store lock and must not touch the store.
        """
        with self._lock:
            received_at = datetime.now(timezone.utc)
            if self._last_received_at is not None and received_at < self._last_received_at:
                received_at = self._last_received_at
            reading = factory(next(self._ids), received_at)
            self._readings.appendleft(reading)
            self._last_received_at = received_at
            return reading

    def list(self) -> list[Reading]:
        with self._lock:
            return list(self._readings)

    def latest(self) -> Optional[Reading]:
        with self._lock:
            if not self._readings:
                return None
            return self._readings[0]

    def count(self) -> int:
        with self._lock:
            return len(self._readings)
