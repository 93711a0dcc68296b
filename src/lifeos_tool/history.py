"""Historial diario (calendario + merge de metricas y puntajes)."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

import pandas as pd

from lifeos_tool.model import DailyEntry, HealthScore
from lifeos_tool.scoring import compute_score, dedupe_by_date

SCORE_COLUMNS = [
    "date",
    "water_score",
    "exercise_score",
    "mood_score",
    "gratitude_score",
    "total_score",
    "rating",
]

METRIC_COLUMNS = [
    "date",
    "water_ml",
    "exercise_minutes",
    "mood",
    "gratitude_entry",
]


def scores_to_frame(scores: Sequence[HealthScore]) -> pd.DataFrame:
    """Convert scores to a DataFrame sorted by date."""
    rows = [
        {
            "date": s.date,
            "water_score": s.water_score,
            "exercise_score": s.exercise_score,
            "mood_score": s.mood_score,
            "gratitude_score": s.gratitude_score,
            "total_score": s.total_score,
            "rating": s.rating,
        }
        for s in scores
    ]
    if not rows:
        return pd.DataFrame(columns=SCORE_COLUMNS)
    return pd.DataFrame(rows).sort_values("date").reset_index(drop=True)


def entries_to_frame(entries: Sequence[DailyEntry]) -> pd.DataFrame:
    """Raw tracked metrics, one row per date."""
    rows = [
        {
            "date": e.entry_date,
            "water_ml": e.water_ml,
            "exercise_minutes": e.exercise_minutes,
            "mood": e.mood_score,
            "gratitude_entry": e.gratitude_entry,
        }
        for e in dedupe_by_date(entries)
    ]
    if not rows:
        return pd.DataFrame(columns=METRIC_COLUMNS)
    return pd.DataFrame(rows).sort_values("date").reset_index(drop=True)


def build_calendar(min_day: date, max_day: date) -> pd.DataFrame:
    """Build inclusive day calendar DataFrame."""
    days = pd.date_range(start=min_day, end=max_day, freq="D")
    return pd.DataFrame({"date": days.date})


def daily_history(
    entries: Sequence[DailyEntry],
    start: date,
    end: date,
) -> pd.DataFrame:
    """Metrics and scores for every logged day between ``start`` and ``end``.

    Args:
        entries: Entries for one user (any order).
        start: First calendar day (inclusive).
        end: Last calendar day (inclusive).

    Returns:
        DataFrame with METRIC_COLUMNS followed by the score columns; days
        without an entry are dropped.
    """
    in_range = [e for e in dedupe_by_date(entries) if start <= e.entry_date <= end]
    metrics = entries_to_frame(in_range)
    scores = scores_to_frame([compute_score(e) for e in in_range])

    cal = build_calendar(min_day=start, max_day=end)
    out = cal.merge(metrics, on="date", how="left").merge(
        scores, on="date", how="left"
    )
    out = out.sort_values("date").reset_index(drop=True)
    return drop_empty_days(out)


def drop_empty_days(df: pd.DataFrame) -> pd.DataFrame:
    """Drop days where every metric/score column is null/NA."""
    if df.empty:
        return df

    candidate_cols = METRIC_COLUMNS[1:] + SCORE_COLUMNS[1:]
    existing = [c for c in candidate_cols if c in df.columns]
    if not existing:
        return df

    mask = df[existing].notna().any(axis=1)
    return df.loc[mask].reset_index(drop=True)
