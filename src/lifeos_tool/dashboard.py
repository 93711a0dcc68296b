"""Dashboard: puntaje de hoy, tendencias semanal/mensual y racha."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta

from lifeos_tool.model import HealthScore, HealthTrend
from lifeos_tool.repository import EntryRepository, RepositoryError
from lifeos_tool.scoring import compute_score, compute_streak, compute_trend
from lifeos_tool.session import SessionProvider
from lifeos_tool.state import SnapshotStore

logger = logging.getLogger(__name__)

WEEK_DAYS = 7
MONTH_DAYS = 30


@dataclass(frozen=True)
class DashboardSnapshot:
    """Immutable view of the dashboard state."""

    today_score: HealthScore | None = None
    yesterday_score: HealthScore | None = None
    weekly_trend: HealthTrend | None = None
    monthly_trend: HealthTrend | None = None
    current_streak: int = 0
    is_loading: bool = False
    error_message: str | None = None

    @property
    def motivational_message(self) -> str:
        today = self.today_score
        if today is None:
            return "Start your day strong! 💪"
        total = today.total_score
        if total >= 90:
            return "You're crushing it today! 🌟"
        if total >= 75:
            return "Great progress! Keep it up! 💪"
        if total >= 60:
            return "Good work! You're on track! 👍"
        if total >= 40:
            return "You've got this! Keep going! 📈"
        yesterday = self.yesterday_score
        if yesterday is not None and total > yesterday.total_score:
            return "Better than yesterday! 📈"
        return "Every step counts! 🎯"

    @property
    def completion_percentage(self) -> float:
        if self.today_score is None:
            return 0.0
        return self.today_score.total_score / 100.0

    @property
    def score_change(self) -> int | None:
        if self.today_score is None or self.yesterday_score is None:
            return None
        return self.today_score.total_score - self.yesterday_score.total_score

    @property
    def score_change_description(self) -> str | None:
        change = self.score_change
        if change is None:
            return None
        if change > 0:
            return f"+{change} from yesterday"
        if change < 0:
            return f"{change} from yesterday"
        return "Same as yesterday"


class DashboardStore(SnapshotStore[DashboardSnapshot]):
    """Computes dashboard snapshots from the injected repository and session."""

    def __init__(self, repository: EntryRepository, session: SessionProvider) -> None:
        super().__init__(DashboardSnapshot())
        self._repository = repository
        self._session = session
        self._request = 0

    def refresh(self, today: date | datetime) -> DashboardSnapshot:
        """Fetch the last 30 days for the active user and publish a snapshot.

        Repository failures end up in ``error_message``; the previous scores
        are kept. A refresh started later supersedes this one.
        """
        if isinstance(today, datetime):
            today = today.date()
        self._request += 1
        request = self._request
        user_id = self._session.current_user_id()
        self._publish(replace(self.snapshot, is_loading=True, error_message=None))

        month_start = today - timedelta(days=MONTH_DAYS)
        try:
            entries = self._repository.list_entries(user_id, month_start, today)
        except RepositoryError as exc:
            logger.exception("Error cargando el dashboard de %s", user_id)
            if request == self._request:
                self._publish(
                    replace(
                        self.snapshot,
                        is_loading=False,
                        error_message=f"Failed to load dashboard: {exc}",
                    )
                )
            return self.snapshot

        if request != self._request:
            logger.debug("Refresh %s descartado (hay uno mas nuevo)", request)
            return self.snapshot

        snapshot = build_snapshot(
            [compute_score(entry) for entry in entries],
            compute_streak(entries, today),
            today,
        )
        logger.info(
            "Dashboard de %s: %s entradas, racha %s",
            user_id,
            len(entries),
            snapshot.current_streak,
        )
        self._publish(snapshot)
        return snapshot


def build_snapshot(
    scores: list[HealthScore], streak: int, today: date
) -> DashboardSnapshot:
    """Assemble a snapshot from the scores of the last month.

    Trends are computed in chronological order, so a positive change means
    the recent half of the period scored higher.
    """
    ordered = sorted(scores, key=lambda s: s.date)
    yesterday = today - timedelta(days=1)
    week_start = today - timedelta(days=WEEK_DAYS)
    return DashboardSnapshot(
        today_score=next((s for s in ordered if s.date == today), None),
        yesterday_score=next((s for s in ordered if s.date == yesterday), None),
        weekly_trend=compute_trend([s for s in ordered if s.date >= week_start]),
        monthly_trend=compute_trend(ordered),
        current_streak=streak,
    )
