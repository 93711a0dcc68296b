"""Persistencia SQLite para configuracion y entradas diarias."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import closing
from dataclasses import dataclass, replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

from dateutil import tz

from lifeos_tool.codec import (
    RECORD_KEYS,
    entry_from_record,
    entry_to_record,
    format_entry_date,
)
from lifeos_tool.model import DailyEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS daily_entries (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    entry_date TEXT NOT NULL,
    water_ml INTEGER NOT NULL DEFAULT 0,
    calories INTEGER,
    protein_g REAL,
    carbs_g REAL,
    fats_g REAL,
    exercise_minutes INTEGER NOT NULL DEFAULT 0,
    exercise_type TEXT,
    steps INTEGER,
    sleep_hours REAL,
    sleep_quality INTEGER,
    gratitude_entry TEXT,
    coherence_practice_minutes INTEGER NOT NULL DEFAULT 0,
    mood_score INTEGER,
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE(user_id, entry_date)
);

CREATE INDEX IF NOT EXISTS idx_daily_entries_user_date
ON daily_entries(user_id, entry_date);
"""

# Columnas que un upsert sobre (user_id, entry_date) puede modificar.
_UPDATABLE_KEYS: tuple[str, ...] = tuple(
    key
    for key in RECORD_KEYS
    if key not in ("id", "user_id", "entry_date", "created_at")
)


class RepositoryError(Exception):
    """Storage backend failure (wraps driver-specific errors)."""


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    user_id: str
    import_dir: str
    export_dir: str
    timezone: str
    selected_fields: list[str]


class EntryRepository(ABC):
    """Source of daily entries for one or more users."""

    @abstractmethod
    def list_entries(
        self,
        user_id: str,
        start: date,
        end: date | None = None,
        *,
        descending: bool = False,
    ) -> list[DailyEntry]:
        """Return entries with ``start <= entry_date <= end`` ordered by date.

        Raises:
            RepositoryError: If the backend fails.
        """

    @abstractmethod
    def get_entry(self, user_id: str, entry_date: date) -> DailyEntry | None:
        """Return the user's entry for a date, if any."""

    @abstractmethod
    def upsert_entry(self, entry: DailyEntry) -> DailyEntry:
        """Insert or update the (user, date) entry and return the stored one."""


class SQLiteEntryStore(EntryRepository):
    """Repositorio SQLite para la app."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.executescript(SCHEMA_SQL)
                conn.commit()
        except sqlite3.Error as exc:
            raise RepositoryError(f"No se pudo inicializar {self._db_path}") from exc

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        defaults = {
            "user_id": "",
            "import_dir": "",
            "export_dir": "",
            "timezone": DEFAULT_TIMEZONE,
            "selected_fields": json.dumps(_default_fields()),
        }
        try:
            with closing(self._connect()) as conn, conn:
                rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError("No se pudo leer la configuracion") from exc
        values = {row["key"]: row["value"] for row in rows}
        merged = {**defaults, **values}
        return AppConfig(
            user_id=merged["user_id"],
            import_dir=merged["import_dir"],
            export_dir=merged["export_dir"],
            timezone=merged["timezone"] or DEFAULT_TIMEZONE,
            selected_fields=_parse_json_list(merged["selected_fields"]),
        )

    def save_config(self, config: AppConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        payload = {
            "user_id": config.user_id,
            "import_dir": config.import_dir,
            "export_dir": config.export_dir,
            "timezone": config.timezone,
            "selected_fields": json.dumps(config.selected_fields),
        }
        try:
            with closing(self._connect()) as conn, conn:
                conn.executemany(
                    """
                    INSERT INTO app_config(key, value) VALUES(?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value
                    """,
                    payload.items(),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise RepositoryError("No se pudo guardar la configuracion") from exc

    def list_entries(
        self,
        user_id: str,
        start: date,
        end: date | None = None,
        *,
        descending: bool = False,
    ) -> list[DailyEntry]:
        order = "DESC" if descending else "ASC"
        params: list[object] = [user_id, format_entry_date(start)]
        sql = "SELECT * FROM daily_entries WHERE user_id = ? AND entry_date >= ?"
        if end is not None:
            sql += " AND entry_date <= ?"
            params.append(format_entry_date(end))
        sql += f" ORDER BY entry_date {order}"
        logger.debug("Listando entradas de %s desde %s hasta %s", user_id, start, end)
        try:
            with closing(self._connect()) as conn, conn:
                rows = conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError("No se pudieron leer las entradas") from exc
        return [entry_from_record(dict(row)) for row in rows]

    def get_entry(self, user_id: str, entry_date: date) -> DailyEntry | None:
        try:
            with closing(self._connect()) as conn, conn:
                row = conn.execute(
                    "SELECT * FROM daily_entries WHERE user_id = ? AND entry_date = ?",
                    (user_id, format_entry_date(entry_date)),
                ).fetchone()
        except sqlite3.Error as exc:
            raise RepositoryError("No se pudo leer la entrada") from exc
        if row is None:
            return None
        return entry_from_record(dict(row))

    def upsert_entry(self, entry: DailyEntry) -> DailyEntry:
        """Guarda la entrada; si ya existe (user_id, entry_date) la actualiza.

        The stored row keeps its original ``id`` and ``created_at``;
        ``updated_at`` is bumped to now.
        """
        now = datetime.now(tz=tz.UTC)
        stamped = replace(
            entry,
            created_at=entry.created_at or now,
            updated_at=now,
        )
        record = entry_to_record(stamped)
        columns = ", ".join(RECORD_KEYS)
        placeholders = ", ".join("?" for _ in RECORD_KEYS)
        updates = ", ".join(f"{key}=excluded.{key}" for key in _UPDATABLE_KEYS)
        logger.debug("Upsert de entrada %s para %s", entry.entry_date, entry.user_id)
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    f"""
                    INSERT INTO daily_entries({columns}) VALUES ({placeholders})
                    ON CONFLICT(user_id, entry_date) DO UPDATE SET {updates}
                    """,
                    tuple(record[key] for key in RECORD_KEYS),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise RepositoryError("No se pudo guardar la entrada") from exc

        stored = self.get_entry(entry.user_id, entry.entry_date)
        if stored is None:
            raise RepositoryError("La entrada guardada no se encontro")
        return stored


def new_entry_id() -> str:
    return str(uuid.uuid4())


def _default_fields() -> list[str]:
    return [
        "date",
        "water_ml",
        "exercise_minutes",
        "mood",
        "gratitude_entry",
        "water_score",
        "exercise_score",
        "mood_score",
        "gratitude_score",
        "total_score",
        "rating",
    ]


def _parse_json_list(raw: str) -> list[str]:
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        return _default_fields()
    if not isinstance(parsed, list):
        return _default_fields()
    out = [str(item) for item in parsed]
    return out or _default_fields()
