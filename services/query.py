"""Read-only views over the reading history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from datastore.reading_store import ReadingStore
from models.records import Reading


@dataclass(frozen=True)
class ReadingSnapshot:
    """Point-in-time copy of the store, newest first."""

    count: int
    readings: List[Reading] = field(default_factory=list)


class QueryService:

    def __init__(self, store: ReadingStore) -> None:
        self.store = store

    def list_all(self, limit: Optional[int] = None) -> ReadingSnapshot:
        """Return the current history; ``limit`` trims to the newest entries.

        ``count`` always reflects the whole store so clients can tell when a
        limited view is partial.
        """
        if limit is not None and limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}.")
        readings = self.store.list()
        total = len(readings)
        if limit is not None:
            readings = readings[:limit]
        return ReadingSnapshot(count=total, readings=readings)

    def latest(self) -> Optional[Reading]:
        return self.store.latest()
