"""Lectura de exportaciones JSON de la tabla daily_entries del backend."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lifeos_tool.codec import entry_from_record
from lifeos_tool.model import DailyEntry
from lifeos_tool.sources.base import DataSource, SourcePaths

logger = logging.getLogger(__name__)

EXPORT_GLOB = "daily_entries*.json"


@dataclass(frozen=True)
class JsonExportPaths(SourcePaths):
    """Paths for daily_entries JSON exports."""

    # root: folder containing daily_entries*.json


class JsonExportSource(DataSource):
    """Backend JSON export reading source."""

    def validate(self) -> None:
        """Validate that the export directory exists."""
        if not self._paths.root.exists():
            raise FileNotFoundError(str(self._paths.root))

    def newest_export(self) -> Path:
        """Return newest daily_entries*.json by mtime."""
        files = sorted(
            self._paths.root.glob(EXPORT_GLOB),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        if not files:
            raise FileNotFoundError(f"No {EXPORT_GLOB} in {self._paths.root}")
        return files[0]

    def load_entries(self, path: Path) -> list[DailyEntry]:
        """Parse a JSON export into typed entries.

        Args:
            path: Path to JSON file.

        Returns:
            Entries sorted by date.

        Raises:
            ValueError: If the JSON shape or a record is invalid.
        """
        text = path.read_text(encoding="utf-8")
        raw = _extract_json_list(text)
        if not isinstance(raw, list):
            raise ValueError("daily_entries JSON must be a list")

        out: list[DailyEntry] = []
        for item in raw:
            if not isinstance(item, dict):
                logger.debug("Item ignorado (no es objeto): %r", item)
                continue
            out.append(entry_from_record(item))
        out.sort(key=lambda e: e.entry_date)
        return out


def _extract_json_list(text: str) -> Any:
    """Extract JSON array from text, tolerating leading non-JSON (e.g. log lines)."""
    start = text.find("[")
    if start >= 0:
        return json.loads(text[start:])
    return json.loads(text)
