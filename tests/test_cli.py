"""Tests for CLI entrypoints."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
from openpyxl import load_workbook

from lifeos_tool import __main__ as entrypoint
from lifeos_tool import cli
from lifeos_tool.repository import SQLiteEntryStore


class _FixedDatetime(datetime):
    @classmethod
    def now(cls, tz: Any | None = None) -> _FixedDatetime:
        return cls(2026, 3, 10, 21, 30, 0, tzinfo=tz)


@pytest.fixture()
def db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(cli, "datetime", _FixedDatetime)
    path = tmp_path / "lifeos.sqlite3"
    assert cli.main(["--db", str(path), "config", "--user-id", "u1"]) == 0
    return path


def test_parse_args_log_values() -> None:
    ns = cli.parse_args(["--db", "/tmp/x.db", "log", "--water", "250", "--mood", "7"])
    assert ns.db == "/tmp/x.db"
    assert ns.command == "log"
    assert ns.water == 250
    assert ns.exercise == 0
    assert ns.mood == 7
    assert ns.gratitude is None


def test_parse_args_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args([])


def test_config_persists_values(
    db: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(
        ["--db", str(db), "config", "--export-dir", str(tmp_path), "--timezone", "UTC"]
    )
    assert code == 0
    config = SQLiteEntryStore(db).load_config()
    assert config.user_id == "u1"
    assert config.export_dir == str(tmp_path)
    assert config.timezone == "UTC"
    assert "timezone: UTC" in capsys.readouterr().out


def test_config_rejects_unknown_timezone(db: Path) -> None:
    with pytest.raises(ValueError, match="Zona horaria"):
        cli.main(["--db", str(db), "config", "--timezone", "Mars/Olympus"])


def test_log_then_dashboard(db: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--db", str(db), "log", "--water", "1000", "--mood", "8"]) == 0
    assert (
        cli.main(
            ["--db", str(db), "log", "--water", "1000", "--gratitude", "el mate"]
        )
        == 0
    )
    out = capsys.readouterr().out
    # agua 20 + ánimo 24 + gratitud 20
    assert "2026-03-10: 64/100 Good" in out

    stored = SQLiteEntryStore(db).list_entries("u1", datetime(2026, 3, 1).date())
    assert len(stored) == 1
    assert stored[0].water_ml == 2000

    assert cli.main(["--db", str(db), "dashboard"]) == 0
    out = capsys.readouterr().out
    assert "Hoy: 64/100 Good" in out
    assert "Racha: 1 días" in out
    assert "Good work! You're on track!" in out


def test_log_explicit_date(db: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.main(["--db", str(db), "log", "--exercise", "30", "--date", "2026-03-09"])
    assert code == 0
    assert "2026-03-09:" in capsys.readouterr().out


def test_import_newest_export(
    db: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exports = tmp_path / "exports"
    exports.mkdir()
    record = {
        "id": "e1",
        "user_id": "u1",
        "entry_date": "2026-03-10",
        "water_ml": 500,
        "exercise_minutes": 10,
        "created_at": "2026-03-10T08:00:00+00:00",
        "updated_at": "2026-03-10T08:00:00+00:00",
    }
    (exports / "daily_entries_1.json").write_text(json.dumps([record]), "utf-8")
    assert cli.main(["--db", str(db), "config", "--import-dir", str(exports)]) == 0

    assert cli.main(["--db", str(db), "import"]) == 0
    assert "OK: entradas: 1" in capsys.readouterr().out
    stored = SQLiteEntryStore(db).get_entry("u1", datetime(2026, 3, 10).date())
    assert stored is not None
    assert stored.exercise_minutes == 10


def test_export_writes_xlsx(db: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    assert cli.main(["--db", str(db), "config", "--export-dir", str(out_dir)]) == 0
    assert cli.main(["--db", str(db), "log", "--water", "2000"]) == 0

    assert cli.main(["--db", str(db), "export", "--days", "7"]) == 0

    files = list(out_dir.glob("lifeos_historial_*.xlsx"))
    assert len(files) == 1
    assert files[0].name == "lifeos_historial_2026-03-10_21-30-00.xlsx"
    ws = load_workbook(files[0]).active
    assert ws is not None
    headers = [cell.value for cell in ws[1]]
    assert "Puntaje" in headers


def test_export_without_data(db: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--db", str(db), "export"]) == 0
    assert "No hay datos" in capsys.readouterr().out


def test_entrypoint_reports_missing_session(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(
        "sys.argv", ["prog", "--db", str(tmp_path / "x.sqlite3"), "dashboard"]
    )
    assert entrypoint.main() == 1
    assert "No hay sesión activa" in capsys.readouterr().out
