"""Generación de Excel formateado con el historial de puntajes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

_DIA_SEMANA: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "date": "Fecha",
    "water_ml": "Agua (ml)",
    "exercise_minutes": "Ejercicio\n(min)",
    "mood": "Ánimo\n(1-10)",
    "gratitude_entry": "Gratitud",
    "water_score": "Pts agua",
    "exercise_score": "Pts ejercicio",
    "mood_score": "Pts ánimo",
    "gratitude_score": "Pts gratitud",
    "total_score": "Puntaje",
    "rating": "Rating",
}

# Mismos cortes que HealthScore.color
_SCORE_FILLS: tuple[tuple[int, str], ...] = (
    (90, "C6EFCE"),
    (75, "DDEBF7"),
    (60, "FCE4D6"),
    (0, "FFC7CE"),
)


@dataclass(frozen=True)
class ExcelLayout:
    """Layout/formatting configuration for the history sheet."""

    sheet_name: str = "Historial diario"


def _weekday_label(i: object) -> str:
    """Convierte índice 0-6 (lunes-domingo) a etiqueta de 3 letras."""
    try:
        if i is None or (isinstance(i, float) and pd.isna(i)):
            return ""
        if isinstance(i, int | float):
            idx = int(i)
            return _DIA_SEMANA[idx] if 0 <= idx < 7 else ""
        return ""
    except (ValueError, TypeError):
        return ""


def _add_weekday_column(export_df: pd.DataFrame) -> pd.DataFrame:
    """Añade columna weekday (Día) a partir de date."""
    if "date" not in export_df.columns:
        return export_df
    weekday_series = pd.to_datetime(export_df["date"]).dt.weekday
    if weekday_series.empty:
        return export_df
    export_df = export_df.copy()
    export_df["weekday"] = weekday_series.map(_weekday_label)
    cols = ["weekday"] + [c for c in export_df.columns if c != "weekday"]
    return export_df[cols]


def write_history_xlsx(df: pd.DataFrame, out_path: Path, layout: ExcelLayout) -> None:
    """Write a formatted Excel file with the daily history.

    Args:
        df: Daily history DataFrame (see ``history.daily_history``).
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    export_df = _add_weekday_column(df.copy())
    if "date" in export_df.columns:
        export_df["date"] = pd.to_datetime(export_df["date"], errors="coerce")
    export_df = export_df.rename(columns=_HEADER_MAP)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.sheet_name)
        ws = writer.book[layout.sheet_name]
        _format_sheet(ws)


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación, borde y altura fija a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border
        ws.row_dimensions[row[0].row].height = 15


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    """Establece anchos de columna para evitar ###."""
    widths = [
        ("Día", 6),
        ("Fecha", 12),
        ("Agua (ml)", 10),
        ("Ejercicio\n(min)", 10),
        ("Ánimo\n(1-10)", 8),
        ("Gratitud", 30),
        ("Puntaje", 9),
        ("Rating", 12),
    ]
    for header, width in widths:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    """Aplica formatos numéricos por cabecera."""
    fmt_map: dict[str, str] = {
        "Fecha": "dd/mm/yyyy",
        "Agua (ml)": "#,##0",
        "Ejercicio\n(min)": "0",
        "Ánimo\n(1-10)": "0",
        "Puntaje": "0",
    }
    for row in ws.iter_rows(min_row=2):
        for header, fmt in fmt_map.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _apply_score_fills(ws: Any, col_index: dict[str, int]) -> None:
    """Colorea la celda de puntaje según el nivel (verde/azul/naranja/rojo)."""
    idx = col_index.get("Puntaje")
    if idx is None:
        return
    for row in ws.iter_rows(min_row=2):
        cell = row[idx - 1]
        if not isinstance(cell.value, int | float):
            continue
        for floor, color in _SCORE_FILLS:
            if cell.value >= floor:
                cell.fill = PatternFill(
                    start_color=color, end_color=color, fill_type="solid"
                )
                break


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths, number formats and score fills to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
    _apply_score_fills(ws, col_index)
