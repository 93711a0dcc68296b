"""Motor de puntaje: score diario, tendencias y racha.

Funciones puras: no hacen I/O ni leen el reloj del sistema.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from lifeos_tool.model import DailyEntry, HealthScore, HealthTrend

# Pesos (total = 100 puntos)
WATER_MAX_POINTS = 20
EXERCISE_MAX_POINTS = 30
MOOD_MAX_POINTS = 30
GRATITUDE_MAX_POINTS = 20

# Objetivos
WATER_TARGET_ML = 2000
EXERCISE_TARGET_MINUTES = 30
MOOD_TARGET = 10

TREND_MIN_SCORES = 4


def _pro_rated(value: float, target: float, max_points: int) -> int:
    """Linear points for value/target, clamped to [0, 1] and truncated."""
    ratio = min(max(value / target, 0.0), 1.0)
    return math.floor(ratio * max_points)


def compute_score(entry: DailyEntry) -> HealthScore:
    """Compute the 0-100 health score of one entry.

    Out-of-range inputs are clamped, never rejected: negative water or
    exercise give 0 points and mood above the scale caps at the maximum.

    Args:
        entry: Daily entry to score.

    Returns:
        Immutable HealthScore for the entry's date.
    """
    water = _pro_rated(entry.water_ml, WATER_TARGET_ML, WATER_MAX_POINTS)
    exercise = _pro_rated(
        entry.exercise_minutes, EXERCISE_TARGET_MINUTES, EXERCISE_MAX_POINTS
    )
    if entry.mood_score is None:
        mood = 0
    else:
        mood = _pro_rated(entry.mood_score, MOOD_TARGET, MOOD_MAX_POINTS)
    gratitude = GRATITUDE_MAX_POINTS if entry.gratitude_entry else 0
    return HealthScore(
        water_score=water,
        exercise_score=exercise,
        mood_score=mood,
        gratitude_score=gratitude,
        total_score=water + exercise + mood + gratitude,
        date=_as_day(entry.entry_date),
    )


def compute_trend(scores: Sequence[HealthScore]) -> HealthTrend | None:
    """Average score plus change between the two halves of the sequence.

    The split is by index at ``n // 2``, so with an odd count the second
    half is the larger one. Fewer than four scores report no change.

    Returns:
        HealthTrend, or None when ``scores`` is empty.
    """
    count = len(scores)
    if count == 0:
        return None

    average = _mean(s.total_score for s in scores)
    if count < TREND_MIN_SCORES:
        return HealthTrend(average_score=average, change=0.0, days=count)

    midpoint = count // 2
    first_avg = _mean(s.total_score for s in scores[:midpoint])
    second_avg = _mean(s.total_score for s in scores[midpoint:])
    return HealthTrend(
        average_score=average,
        change=second_avg - first_avg,
        days=count,
    )


def is_meaningful(entry: DailyEntry) -> bool:
    """An entry counts for the streak if anything was actually logged."""
    return (
        entry.water_ml > 0
        or entry.exercise_minutes > 0
        or entry.mood_score is not None
    )


def dedupe_by_date(entries: Iterable[DailyEntry]) -> list[DailyEntry]:
    """Keep one entry per date: the most recently updated, then the last seen."""
    by_day: dict[date, DailyEntry] = {}
    for entry in entries:
        day = _as_day(entry.entry_date)
        current = by_day.get(day)
        if current is None or _updated_key(entry) >= _updated_key(current):
            by_day[day] = entry
    return list(by_day.values())


def compute_streak(entries: Iterable[DailyEntry], today: date | datetime) -> int:
    """Count consecutive meaningful days walking back from ``today``.

    The walk stops at the first gap or at the first entry with nothing
    logged. An entry-less ``today`` gives 0 even if yesterday was logged.

    Args:
        entries: Entries in any order; duplicates per date are collapsed.
        today: Reference day (a datetime is truncated to its date).

    Returns:
        Streak length (>= 0).
    """
    unique = dedupe_by_date(entries)
    if not unique:
        return 0

    ordered = sorted(unique, key=lambda e: _as_day(e.entry_date), reverse=True)
    cursor = _as_day(today)
    streak = 0
    for entry in ordered:
        if _as_day(entry.entry_date) != cursor:
            break
        if not is_meaningful(entry):
            break
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def _as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _mean(values: Iterable[int]) -> float:
    items = list(values)
    return sum(items) / len(items)


def _updated_key(entry: DailyEntry) -> float:
    if entry.updated_at is None:
        return float("-inf")
    return entry.updated_at.timestamp()
