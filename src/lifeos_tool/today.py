"""Edicion de la entrada del dia (agua, ejercicio, animo, gratitud)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date

from lifeos_tool.model import DailyEntry
from lifeos_tool.repository import EntryRepository, RepositoryError, new_entry_id
from lifeos_tool.session import SessionProvider
from lifeos_tool.state import SnapshotStore

logger = logging.getLogger(__name__)

DEFAULT_MOOD = 5


@dataclass(frozen=True)
class TodaySnapshot:
    """Form state for one day's entry."""

    entry: DailyEntry | None = None
    water_ml: int = 0
    exercise_minutes: int = 0
    mood_score: int = DEFAULT_MOOD
    gratitude_entry: str = ""
    is_loading: bool = False
    error_message: str | None = None


class TodayEntryStore(SnapshotStore[TodaySnapshot]):
    """Loads, edits and saves the active user's entry for a day."""

    def __init__(self, repository: EntryRepository, session: SessionProvider) -> None:
        super().__init__(TodaySnapshot())
        self._repository = repository
        self._session = session

    def load(self, today: date) -> TodaySnapshot:
        """Fill the form from the stored entry, or reset it to defaults."""
        user_id = self._session.current_user_id()
        self._publish(replace(self.snapshot, is_loading=True, error_message=None))
        try:
            entry = self._repository.get_entry(user_id, today)
        except RepositoryError as exc:
            logger.exception("Error leyendo la entrada de %s", today)
            self._publish(
                replace(
                    self.snapshot,
                    is_loading=False,
                    error_message=f"Failed to fetch today's entry: {exc}",
                )
            )
            return self.snapshot

        if entry is None:
            snapshot = TodaySnapshot()
        else:
            snapshot = TodaySnapshot(
                entry=entry,
                water_ml=entry.water_ml,
                exercise_minutes=entry.exercise_minutes,
                mood_score=(
                    entry.mood_score if entry.mood_score is not None else DEFAULT_MOOD
                ),
                gratitude_entry=entry.gratitude_entry or "",
            )
        self._publish(snapshot)
        return snapshot

    def save(self, today: date) -> TodaySnapshot:
        """Upsert the form values as the entry for ``today``."""
        user_id = self._session.current_user_id()
        current = self.snapshot
        self._publish(replace(current, is_loading=True, error_message=None))

        base = current.entry
        if base is None or base.entry_date != today or base.user_id != user_id:
            base = DailyEntry(id=new_entry_id(), user_id=user_id, entry_date=today)
        to_save = replace(
            base,
            water_ml=current.water_ml,
            exercise_minutes=current.exercise_minutes,
            mood_score=current.mood_score,
            gratitude_entry=current.gratitude_entry,
        )
        try:
            saved = self._repository.upsert_entry(to_save)
        except RepositoryError as exc:
            logger.exception("Error guardando la entrada de %s", today)
            self._publish(
                replace(
                    current,
                    is_loading=False,
                    error_message=f"Failed to save entry: {exc}",
                )
            )
            return self.snapshot

        logger.info("Entrada de %s guardada para %s", today, user_id)
        self._publish(replace(current, entry=saved, is_loading=False))
        return self.snapshot

    def add_water(self, amount_ml: int, today: date) -> TodaySnapshot:
        self._publish(
            replace(self.snapshot, water_ml=self.snapshot.water_ml + amount_ml)
        )
        return self.save(today)

    def add_exercise(self, minutes: int, today: date) -> TodaySnapshot:
        self._publish(
            replace(
                self.snapshot,
                exercise_minutes=self.snapshot.exercise_minutes + minutes,
            )
        )
        return self.save(today)

    def update_mood(self, score: int, today: date) -> TodaySnapshot:
        self._publish(replace(self.snapshot, mood_score=score))
        return self.save(today)

    def update_gratitude(self, text: str) -> TodaySnapshot:
        # No se guarda automaticamente: el usuario confirma con save().
        self._publish(replace(self.snapshot, gratitude_entry=text))
        return self.snapshot
