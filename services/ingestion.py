"""Validation and admission of readings posted by the sensor device."""

from __future__ import annotations

import copy
import logging
import math
import re
from typing import Any, Mapping, Sequence

from datastore.reading_store import ReadingStore
from models.records import Reading

logger = logging.getLogger(__name__)

TIME_OCCURRED_FIELD = "timeOccurred"
ANGLE_FIELD = "angle"
REQUIRED_FIELDS = (TIME_OCCURRED_FIELD, ANGLE_FIELD)

# Longest numeric prefix accepted by the lenient coercion, e.g. "12.5deg" -> 12.5.
_LEADING_NUMBER = re.compile(
    r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)


class ReadingValidationError(ValueError):
    """Base class for payloads rejected before reaching the store."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingFieldError(ReadingValidationError):
    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = tuple(fields)
        super().__init__(f"Missing required fields: {' and '.join(self.fields)}")


class InvalidFieldError(ReadingValidationError):
    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        shown = repr(value)
        if len(shown) > 40:
            shown = f"{shown[:37]}..."
        super().__init__(f"Field {field!r} must be a finite number, got {shown}")


class MalformedPayloadError(ReadingValidationError):
    pass


def parse_leading_float(value: Any) -> float:
    """Coerce like a browser's ``parseFloat``: numeric prefix or NaN."""
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    text = value if isinstance(value, str) else str(value)
    match = _LEADING_NUMBER.match(text.lstrip())
    if match is None:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def parse_strict_float(value: Any) -> float:
    """Accept finite numbers and plain numeric strings; reject everything else."""
    if isinstance(value, bool):
        raise InvalidFieldError(ANGLE_FIELD, value)
    if isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError as exc:
            raise InvalidFieldError(ANGLE_FIELD, value) from exc
    elif isinstance(value, str):
        # float() also takes "1_000"; JSON numbers have no digit separators.
        if "_" in value:
            raise InvalidFieldError(ANGLE_FIELD, value)
        try:
            parsed = float(value.strip())
        except ValueError as exc:
            raise InvalidFieldError(ANGLE_FIELD, value) from exc
    else:
        raise InvalidFieldError(ANGLE_FIELD, value)
    if not math.isfinite(parsed):
        raise InvalidFieldError(ANGLE_FIELD, value)
    return parsed


class IngestionService:
    """Turns raw device payloads into stored readings."""

    def __init__(self, store: ReadingStore, angle_coercion: str = "strict") -> None:
        if angle_coercion not in ("strict", "lenient"):
            raise ValueError(f"Unknown angle coercion mode {angle_coercion!r}.")
        self.store = store
        self.angle_coercion = angle_coercion

    def accept(self, payload: Any) -> Reading:
        """Validate ``payload`` and insert the resulting reading.

        Raises a ``ReadingValidationError`` subclass without touching the
        store when the payload is rejected.
        """
        try:
            angle, time_occurred = self._validate(payload)
        except ReadingValidationError as exc:
            logger.warning(
                "Rejected sensor payload: %s",
                exc.message,
                extra={
                    "reason": type(exc).__name__,
                    "missing_fields": getattr(exc, "fields", None),
                },
            )
            raise

        reading = self.store.insert_with(
            lambda reading_id, received_at: Reading(
                id=reading_id,
                time_occurred=time_occurred,
                angle=angle,
                received_at=received_at,
            )
        )
        logger.info(
            "Received reading: time=%s angle=%s°",
            reading.time_occurred,
            reading.angle,
            extra={"reading_id": reading.id, "count": self.store.count()},
        )
        return reading

    def _validate(self, payload: Any) -> tuple[float, Any]:
        if not isinstance(payload, Mapping):
            raise MalformedPayloadError("Request body must be a JSON object")

        missing = [name for name in REQUIRED_FIELDS if name not in payload]
        if missing:
            raise MissingFieldError(missing)

        raw_angle = payload[ANGLE_FIELD]
        if self.angle_coercion == "lenient":
            angle = parse_leading_float(raw_angle)
        else:
            angle = parse_strict_float(raw_angle)

        # Detach nested JSON values so stored readings cannot be changed by the caller.
        time_occurred = copy.deepcopy(payload[TIME_OCCURRED_FIELD])
        return angle, time_occurred
