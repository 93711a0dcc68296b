from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from lifeos_tool.dashboard import DashboardSnapshot, DashboardStore, build_snapshot
from lifeos_tool.model import DailyEntry, HealthScore
from lifeos_tool.repository import (
    EntryRepository,
    RepositoryError,
    SQLiteEntryStore,
    new_entry_id,
)
from lifeos_tool.session import NoActiveSessionError, StaticSession

TODAY = date(2026, 3, 10)


def _score(total: int, day: date = TODAY) -> HealthScore:
    return HealthScore(
        water_score=0,
        exercise_score=0,
        mood_score=0,
        gratitude_score=0,
        total_score=total,
        date=day,
    )


class _FailingRepository(EntryRepository):
    def list_entries(self, *args: object, **kwargs: object) -> list[DailyEntry]:
        raise RepositoryError("backend caído")

    def get_entry(self, user_id: str, entry_date: date) -> DailyEntry | None:
        raise RepositoryError("backend caído")

    def upsert_entry(self, entry: DailyEntry) -> DailyEntry:
        raise RepositoryError("backend caído")


def _seed(store: SQLiteEntryStore, days_ago: int, **kwargs: object) -> None:
    store.upsert_entry(
        DailyEntry(
            id=new_entry_id(),
            user_id="u1",
            entry_date=TODAY - timedelta(days=days_ago),
            **kwargs,  # type: ignore[arg-type]
        )
    )


def test_refresh_publishes_scores_trends_and_streak(tmp_path: Path) -> None:
    store = SQLiteEntryStore(tmp_path / "app.sqlite3")
    _seed(store, 0, water_ml=2000, exercise_minutes=30, mood_score=10)  # 80
    _seed(store, 1, water_ml=1000, mood_score=5)  # 25
    _seed(store, 2, water_ml=500)  # 5
    _seed(store, 3, exercise_minutes=15)  # 15
    _seed(store, 20, gratitude_entry="x")  # 20, fuera de la semana
    _seed(store, 45, water_ml=2000)  # fuera del mes

    dashboard = DashboardStore(store, StaticSession("u1"))
    received: list[DashboardSnapshot] = []
    dashboard.subscribe(received.append)

    snapshot = dashboard.refresh(TODAY)

    assert received[0].is_loading is True
    assert received[-1] == snapshot
    assert snapshot.is_loading is False
    assert snapshot.error_message is None
    assert snapshot.today_score is not None
    assert snapshot.today_score.total_score == 80
    assert snapshot.yesterday_score is not None
    assert snapshot.yesterday_score.total_score == 25
    assert snapshot.current_streak == 4

    weekly = snapshot.weekly_trend
    assert weekly is not None
    assert weekly.days == 4
    # cronologico: [15, 5] -> [25, 80]
    assert weekly.change == 52.5 - 10.0

    monthly = snapshot.monthly_trend
    assert monthly is not None
    assert monthly.days == 5
    assert monthly.average_score == (80 + 25 + 5 + 15 + 20) / 5

    assert snapshot.score_change == 55
    assert snapshot.score_change_description == "+55 from yesterday"
    assert snapshot.completion_percentage == 0.8
    assert snapshot.motivational_message == "Great progress! Keep it up! 💪"


def test_refresh_error_sets_message_and_keeps_previous_scores() -> None:
    dashboard = DashboardStore(_FailingRepository(), StaticSession("u1"))
    snapshot = dashboard.refresh(TODAY)
    assert snapshot.is_loading is False
    assert snapshot.error_message is not None
    assert "backend caído" in snapshot.error_message
    assert snapshot.today_score is None


def test_refresh_without_session_raises() -> None:
    dashboard = DashboardStore(_FailingRepository(), StaticSession(""))
    with pytest.raises(NoActiveSessionError):
        dashboard.refresh(TODAY)


def test_unsubscribe_stops_notifications(tmp_path: Path) -> None:
    store = SQLiteEntryStore(tmp_path / "app.sqlite3")
    dashboard = DashboardStore(store, StaticSession("u1"))
    received: list[DashboardSnapshot] = []
    unsubscribe = dashboard.subscribe(received.append)
    unsubscribe()
    dashboard.refresh(TODAY)
    assert received == []


def test_empty_dashboard() -> None:
    snapshot = build_snapshot([], 0, TODAY)
    assert snapshot.today_score is None
    assert snapshot.weekly_trend is None
    assert snapshot.monthly_trend is None
    assert snapshot.completion_percentage == 0.0
    assert snapshot.score_change is None
    assert snapshot.score_change_description is None
    assert snapshot.motivational_message == "Start your day strong! 💪"


def test_weekly_window_includes_seven_days_ago() -> None:
    scores = [_score(10, TODAY - timedelta(days=d)) for d in range(0, 10)]
    snapshot = build_snapshot(scores, 0, TODAY)
    assert snapshot.weekly_trend is not None
    assert snapshot.weekly_trend.days == 8


@pytest.mark.parametrize(
    ("today_total", "yesterday_total", "message"),
    [
        (95, None, "You're crushing it today! 🌟"),
        (80, None, "Great progress! Keep it up! 💪"),
        (65, None, "Good work! You're on track! 👍"),
        (45, None, "You've got this! Keep going! 📈"),
        (30, 20, "Better than yesterday! 📈"),
        (30, 30, "Every step counts! 🎯"),
        (30, None, "Every step counts! 🎯"),
    ],
)
def test_motivational_message(
    today_total: int, yesterday_total: int | None, message: str
) -> None:
    yesterday = (
        None
        if yesterday_total is None
        else _score(yesterday_total, TODAY - timedelta(days=1))
    )
    snapshot = DashboardSnapshot(
        today_score=_score(today_total), yesterday_score=yesterday
    )
    assert snapshot.motivational_message == message


@pytest.mark.parametrize(
    ("today_total", "yesterday_total", "description"),
    [
        (50, 40, "+10 from yesterday"),
        (40, 50, "-10 from yesterday"),
        (40, 40, "Same as yesterday"),
    ],
)
def test_score_change_description(
    today_total: int, yesterday_total: int, description: str
) -> None:
    snapshot = DashboardSnapshot(
        today_score=_score(today_total),
        yesterday_score=_score(yesterday_total, TODAY - timedelta(days=1)),
    )
    assert snapshot.score_change_description == description


class _ScriptedRepository(EntryRepository):
    """Returns ``entries`` on each call, except the calls listed in ``fail_on``."""

    def __init__(self, entries: list[DailyEntry], fail_on: set[int]) -> None:
        self._entries = entries
        self._fail_on = fail_on
        self.calls = 0

    def list_entries(self, *args: object, **kwargs: object) -> list[DailyEntry]:
        self.calls += 1
        if self.calls in self._fail_on:
            raise RepositoryError("respuesta vieja")
        return list(self._entries)

    def get_entry(self, user_id: str, entry_date: date) -> DailyEntry | None:
        return None

    def upsert_entry(self, entry: DailyEntry) -> DailyEntry:
        return entry


def _reentrant_dashboard(
    repository: EntryRepository,
) -> tuple[DashboardStore, list[DashboardSnapshot]]:
    dashboard = DashboardStore(repository, StaticSession("u1"))
    published: list[DashboardSnapshot] = []

    def listener(snapshot: DashboardSnapshot) -> None:
        published.append(snapshot)
        # Un refresh nuevo arranca mientras el primero sigue cargando.
        if len(published) == 1 and snapshot.is_loading:
            dashboard.refresh(TODAY)

    dashboard.subscribe(listener)
    return dashboard, published


def test_superseded_refresh_does_not_publish_its_result() -> None:
    entry = DailyEntry(id="e1", user_id="u1", entry_date=TODAY, water_ml=2000)
    repository = _ScriptedRepository([entry], fail_on=set())
    dashboard, published = _reentrant_dashboard(repository)

    final = dashboard.refresh(TODAY)

    assert repository.calls == 2
    assert [s.is_loading for s in published] == [True, True, False]
    assert final == published[-1]
    assert dashboard.snapshot == published[-1]
    assert final.today_score is not None
    assert final.today_score.total_score == 20


def test_superseded_refresh_does_not_publish_its_error() -> None:
    entry = DailyEntry(id="e1", user_id="u1", entry_date=TODAY, water_ml=2000)
    # La llamada 1 es la del refresh interno; la 2 (la externa) falla.
    repository = _ScriptedRepository([entry], fail_on={2})
    dashboard, published = _reentrant_dashboard(repository)

    final = dashboard.refresh(TODAY)

    assert repository.calls == 2
    assert [s.is_loading for s in published] == [True, True, False]
    assert all(s.error_message is None for s in published)
    assert final.error_message is None
    assert final.today_score is not None


def test_refresh_truncates_datetime_today(tmp_path: Path) -> None:
    store = SQLiteEntryStore(tmp_path / "app.sqlite3")
    _seed(store, 0, water_ml=1000)
    dashboard = DashboardStore(store, StaticSession("u1"))

    snapshot = dashboard.refresh(datetime(2026, 3, 10, 22, 45))

    assert snapshot.today_score is not None
    assert snapshot.today_score.total_score == 10
    assert snapshot.current_streak == 1
