"""CLI para registrar el dia, ver el dashboard e importar/exportar historial."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import date, datetime, timedelta
from pathlib import Path

import pandas as pd
from dateutil import tz

from lifeos_tool.codec import parse_entry_date
from lifeos_tool.dashboard import DashboardStore
from lifeos_tool.excel_writer import ExcelLayout, write_history_xlsx
from lifeos_tool.history import daily_history
from lifeos_tool.model import HealthTrend
from lifeos_tool.repository import AppConfig, SQLiteEntryStore
from lifeos_tool.scoring import compute_score
from lifeos_tool.session import ConfigSession
from lifeos_tool.sources.json_export import JsonExportPaths, JsonExportSource
from lifeos_tool.today import TodayEntryStore

Command = Callable[[argparse.Namespace, SQLiteEntryStore, AppConfig, date], int]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="LifeOS: registro diario de hábitos y puntaje de salud."
    )
    parser.add_argument(
        "--db",
        default=str(Path.cwd() / "lifeos.sqlite3"),
        help="Base SQLite (default: ./lifeos.sqlite3).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log DEBUG.")
    sub = parser.add_subparsers(dest="command", required=True)

    cfg = sub.add_parser("config", help="Ver o modificar la configuración.")
    cfg.add_argument("--user-id")
    cfg.add_argument("--import-dir")
    cfg.add_argument("--export-dir")
    cfg.add_argument("--timezone")

    log = sub.add_parser("log", help="Registrar agua, ejercicio, ánimo, gratitud.")
    log.add_argument("--water", type=int, default=0, help="ml a sumar.")
    log.add_argument("--exercise", type=int, default=0, help="Minutos a sumar.")
    log.add_argument("--mood", type=int, help="Ánimo 1-10.")
    log.add_argument("--gratitude", help="Texto de gratitud.")
    log.add_argument("--date", help="Fecha YYYY-MM-DD (default: hoy).")

    sub.add_parser("dashboard", help="Puntaje de hoy, tendencias y racha.")

    imp = sub.add_parser("import", help="Importar export JSON de daily_entries.")
    imp.add_argument("--file", help="Archivo JSON (default: el más nuevo).")

    exp = sub.add_parser("export", help="Exportar historial a Excel.")
    exp.add_argument(
        "--days",
        type=int,
        default=30,
        help="Rango de días hacia atrás (default: 30).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 on success).
    """
    ns = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = SQLiteEntryStore(Path(ns.db).expanduser())
    config = store.load_config()
    today = datetime.now(tz=tz.gettz(config.timezone)).date()
    return _COMMANDS[ns.command](ns, store, config, today)


def _cmd_config(
    ns: argparse.Namespace, store: SQLiteEntryStore, config: AppConfig, _: date
) -> int:
    updates = {
        key: value
        for key, value in (
            ("user_id", ns.user_id),
            ("import_dir", ns.import_dir),
            ("export_dir", ns.export_dir),
            ("timezone", ns.timezone),
        )
        if value is not None
    }
    if "timezone" in updates and tz.gettz(updates["timezone"]) is None:
        raise ValueError(f"Zona horaria desconocida: {updates['timezone']}")
    if updates:
        config = replace(config, **updates)
        store.save_config(config)
    print(f"user_id: {config.user_id or '-'}")
    print(f"import_dir: {config.import_dir or '-'}")
    print(f"export_dir: {config.export_dir or '-'}")
    print(f"timezone: {config.timezone}")
    return 0


def _cmd_log(
    ns: argparse.Namespace, store: SQLiteEntryStore, _: AppConfig, today: date
) -> int:
    day = parse_entry_date(ns.date) if ns.date else today
    form = TodayEntryStore(store, ConfigSession(store))
    form.load(day)
    if ns.water:
        form.add_water(ns.water, day)
    if ns.exercise:
        form.add_exercise(ns.exercise, day)
    if ns.mood is not None:
        form.update_mood(ns.mood, day)
    if ns.gratitude is not None:
        form.update_gratitude(ns.gratitude)
        form.save(day)

    snapshot = form.snapshot
    if snapshot.error_message:
        print(f"ERROR: {snapshot.error_message}")
        return 1
    if snapshot.entry is None:
        print(f"Sin entrada para {day.isoformat()}")
        return 0
    score = compute_score(snapshot.entry)
    print(
        f"{day.isoformat()}: {score.total_score}/100 {score.rating} "
        f"{score.rating_emoji}"
    )
    print(
        f"  agua {score.water_score}/20 | ejercicio {score.exercise_score}/30 | "
        f"ánimo {score.mood_score}/30 | gratitud {score.gratitude_score}/20"
    )
    return 0


def _cmd_dashboard(
    _ns: argparse.Namespace, store: SQLiteEntryStore, _: AppConfig, today: date
) -> int:
    dashboard = DashboardStore(store, ConfigSession(store))
    snapshot = dashboard.refresh(today)
    if snapshot.error_message:
        print(f"ERROR: {snapshot.error_message}")
        return 1

    score = snapshot.today_score
    if score is None:
        print("Hoy: sin datos")
    else:
        print(f"Hoy: {score.total_score}/100 {score.rating} {score.rating_emoji}")
    if snapshot.score_change_description:
        print(f"  {snapshot.score_change_description}")
    print(f"Semana: {_trend_line(snapshot.weekly_trend)}")
    print(f"Mes: {_trend_line(snapshot.monthly_trend)}")
    print(f"Racha: {snapshot.current_streak} días")
    print(snapshot.motivational_message)
    return 0


def _cmd_import(
    ns: argparse.Namespace, store: SQLiteEntryStore, config: AppConfig, _: date
) -> int:
    if ns.file:
        path = Path(ns.file).expanduser()
        source = JsonExportSource(JsonExportPaths(root=path.parent))
    else:
        source = JsonExportSource(
            JsonExportPaths(root=Path(config.import_dir).expanduser())
        )
        source.validate()
        path = source.newest_export()

    entries = source.load_entries(path)
    for entry in entries:
        store.upsert_entry(entry)
    print(f"OK: archivo importado: {path}")
    print(f"OK: entradas: {len(entries)}")
    return 0


def _cmd_export(
    ns: argparse.Namespace, store: SQLiteEntryStore, config: AppConfig, today: date
) -> int:
    user_id = ConfigSession(store).current_user_id()
    start = today - timedelta(days=ns.days)
    entries = store.list_entries(user_id, start, today)
    history = _filter_columns(
        daily_history(entries, start, today), config.selected_fields
    )
    if history.empty:
        print("No hay datos para exportar.")
        return 0

    out_dir = (
        Path(config.export_dir).expanduser()
        if config.export_dir
        else Path.cwd() / "salidas"
    )
    ts = datetime.now(tz=tz.gettz(config.timezone)).strftime("%Y-%m-%d_%H-%M-%S")
    out_path = out_dir / f"lifeos_historial_{ts}.xlsx"
    write_history_xlsx(history, out_path, ExcelLayout())
    print(f"OK: días exportados: {len(history)}")
    print(f"OK: Output: {out_path}")
    return 0


def _trend_line(trend: HealthTrend | None) -> str:
    if trend is None:
        return "sin datos"
    return (
        f"promedio {trend.average_score:.1f} en {trend.days} días, "
        f"{trend.change_description}"
    )


def _filter_columns(df: pd.DataFrame, selected_fields: list[str]) -> pd.DataFrame:
    if df.empty:
        return df.copy()
    cols = [field for field in selected_fields if field in df.columns]
    if "date" in df.columns and "date" not in cols:
        cols.insert(0, "date")
    return df.loc[:, cols].copy()


_COMMANDS: dict[str, Command] = {
    "config": _cmd_config,
    "log": _cmd_log,
    "dashboard": _cmd_dashboard,
    "import": _cmd_import,
    "export": _cmd_export,
}
