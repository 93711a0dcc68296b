"""Conversion entre registros snake_case del backend y DailyEntry.

Las fechas se parsean con una lista explicita de formatos: si ninguno
coincide se lanza DateParseError (no hay fallbacks silenciosos).
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from dateutil import tz

from lifeos_tool.model import DailyEntry

ENTRY_DATE_FORMAT = "%Y-%m-%d"

# entry_date: el backend a veces envia un timestamp ISO en la columna date.
ENTRY_DATE_FORMATS: tuple[str, ...] = (
    ENTRY_DATE_FORMAT,
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
)

TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
)

REQUIRED_KEYS: tuple[str, ...] = (
    "id",
    "user_id",
    "entry_date",
    "water_ml",
    "exercise_minutes",
)

RECORD_KEYS: tuple[str, ...] = (
    "id",
    "user_id",
    "entry_date",
    "water_ml",
    "calories",
    "protein_g",
    "carbs_g",
    "fats_g",
    "exercise_minutes",
    "exercise_type",
    "steps",
    "sleep_hours",
    "sleep_quality",
    "gratitude_entry",
    "coherence_practice_minutes",
    "mood_score",
    "notes",
    "created_at",
    "updated_at",
)


class DateParseError(ValueError):
    """Raised when a date string matches none of the accepted formats."""

    def __init__(self, value: object, formats: tuple[str, ...]) -> None:
        self.value = value
        self.formats = formats
        super().__init__(
            f"Fecha no reconocida {value!r}; formatos aceptados: {', '.join(formats)}"
        )


def parse_entry_date(value: object) -> date:
    """Parse a date-only value (``YYYY-MM-DD``, or the date part of a timestamp).

    Raises:
        DateParseError: If no accepted format matches.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return _strptime_first(value, ENTRY_DATE_FORMATS).date()


def parse_timestamp(value: object) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises:
        DateParseError: If no accepted format matches.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = _strptime_first(value, TIMESTAMP_FORMATS)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz.UTC)
    return parsed


def format_entry_date(day: date) -> str:
    return day.strftime(ENTRY_DATE_FORMAT)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz.UTC)
    return value.isoformat(timespec="microseconds")


def entry_from_record(record: Mapping[str, Any]) -> DailyEntry:
    """Build a DailyEntry from a snake_case record (JSON export or SQLite row).

    Args:
        record: Mapping with at least the REQUIRED_KEYS.

    Returns:
        Parsed entry.

    Raises:
        ValueError: If a required key is missing.
        DateParseError: If a date or timestamp cannot be parsed.
    """
    missing = [key for key in REQUIRED_KEYS if record.get(key) is None]
    if missing:
        raise ValueError(f"Registro sin campos requeridos: {', '.join(missing)}")

    return DailyEntry(
        id=str(record["id"]),
        user_id=str(record["user_id"]),
        entry_date=parse_entry_date(record["entry_date"]),
        water_ml=int(record["water_ml"]),
        calories=_optional(record, "calories", int),
        protein_g=_optional(record, "protein_g", float),
        carbs_g=_optional(record, "carbs_g", float),
        fats_g=_optional(record, "fats_g", float),
        exercise_minutes=int(record["exercise_minutes"]),
        exercise_type=_optional(record, "exercise_type", str),
        steps=_optional(record, "steps", int),
        sleep_hours=_optional(record, "sleep_hours", float),
        sleep_quality=_optional(record, "sleep_quality", int),
        gratitude_entry=_optional(record, "gratitude_entry", str),
        coherence_practice_minutes=(
            _optional(record, "coherence_practice_minutes", int) or 0
        ),
        mood_score=_optional(record, "mood_score", int),
        notes=_optional(record, "notes", str),
        created_at=_optional(record, "created_at", parse_timestamp),
        updated_at=_optional(record, "updated_at", parse_timestamp),
    )


def entry_to_record(entry: DailyEntry) -> dict[str, Any]:
    """Serialize an entry to a snake_case record with ISO dates."""
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "entry_date": format_entry_date(entry.entry_date),
        "water_ml": entry.water_ml,
        "calories": entry.calories,
        "protein_g": entry.protein_g,
        "carbs_g": entry.carbs_g,
        "fats_g": entry.fats_g,
        "exercise_minutes": entry.exercise_minutes,
        "exercise_type": entry.exercise_type,
        "steps": entry.steps,
        "sleep_hours": entry.sleep_hours,
        "sleep_quality": entry.sleep_quality,
        "gratitude_entry": entry.gratitude_entry,
        "coherence_practice_minutes": entry.coherence_practice_minutes,
        "mood_score": entry.mood_score,
        "notes": entry.notes,
        "created_at": format_timestamp(entry.created_at)
        if entry.created_at is not None
        else None,
        "updated_at": format_timestamp(entry.updated_at)
        if entry.updated_at is not None
        else None,
    }


def _strptime_first(value: object, formats: tuple[str, ...]) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise DateParseError(value, formats)
    text = value.strip()
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise DateParseError(value, formats)


def _optional(record: Mapping[str, Any], key: str, cast: Any) -> Any:
    value = record.get(key)
    if value is None:
        return None
    return cast(value)
