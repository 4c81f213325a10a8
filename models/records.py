"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Reading:
    """One recorded sensor event.

    ``time_occurred`` is whatever the device sent and is never interpreted.
    ``received_at`` is assigned by the store when the reading is inserted.
    """

    id: int
    time_occurred: Any
    angle: float
    received_at: datetime
