"""Clases base para fuentes de entradas diarias."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from lifeos_tool.model import DailyEntry


@dataclass(frozen=True)
class SourcePaths:
    """Folder where a source finds its export files."""

    root: Path


class DataSource(ABC):
    """Abstract source of DailyEntry records read from files."""

    def __init__(self, paths: SourcePaths) -> None:
        self._paths = paths

    @abstractmethod
    def validate(self) -> None:
        """Check that the export folder exists.

        Raises:
            FileNotFoundError: If required files are missing.
        """

    @abstractmethod
    def newest_export(self) -> Path:
        """Return the most recent export file in the folder."""

    @abstractmethod
    def load_entries(self, path: Path) -> list[DailyEntry]:
        """Parse one export file into entries."""
