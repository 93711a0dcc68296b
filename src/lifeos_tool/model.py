"""Modelos tipados para entradas diarias, puntajes y tendencias."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class DailyEntry:
    """One user's health record for a calendar date."""

    id: str
    user_id: str
    entry_date: date

    # Hidratacion
    water_ml: int = 0

    # Nutricion
    calories: int | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fats_g: float | None = None

    # Ejercicio
    exercise_minutes: int = 0
    exercise_type: str | None = None
    steps: int | None = None

    # Sueño
    sleep_hours: float | None = None
    sleep_quality: int | None = None  # escala 1-10

    # Mental / emocional
    gratitude_entry: str | None = None
    coherence_practice_minutes: int = 0
    mood_score: int | None = None  # escala 1-10

    notes: str | None = None

    created_at: datetime | None = field(default=None, compare=False)
    updated_at: datetime | None = field(default=None, compare=False)


@dataclass(frozen=True)
class HealthScore:
    """Score derived from exactly one DailyEntry (never persisted)."""

    water_score: int
    exercise_score: int
    mood_score: int
    gratitude_score: int
    total_score: int
    date: date

    @property
    def rating(self) -> str:
        if self.total_score >= 90:
            return "Excellent"
        if self.total_score >= 75:
            return "Great"
        if self.total_score >= 60:
            return "Good"
        if self.total_score >= 40:
            return "Fair"
        return "Needs Work"

    @property
    def rating_emoji(self) -> str:
        # Cuatro niveles: "Fair" y "Needs Work" comparten el mismo.
        if self.total_score >= 90:
            return "🌟"
        if self.total_score >= 75:
            return "💪"
        if self.total_score >= 60:
            return "👍"
        return "🎯"

    @property
    def color(self) -> str:
        if self.total_score >= 90:
            return "green"
        if self.total_score >= 75:
            return "blue"
        if self.total_score >= 60:
            return "orange"
        return "red"


@dataclass(frozen=True)
class HealthTrend:
    """Average and first-half/second-half change over a period of scores."""

    average_score: float
    change: float
    days: int

    @property
    def change_description(self) -> str:
        if self.change > 5:
            return f"📈 Up {int(self.change)} pts"
        if self.change < -5:
            return f"📉 Down {int(abs(self.change))} pts"
        return "➡️ Steady"

    @property
    def is_improving(self) -> bool:
        return self.change > 0
