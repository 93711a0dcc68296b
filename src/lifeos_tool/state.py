"""Store minimo de snapshots inmutables con suscripcion."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

SnapshotT = TypeVar("SnapshotT")
Listener = Callable[[SnapshotT], None]


class SnapshotStore(Generic[SnapshotT]):
    """Holds the current snapshot and notifies listeners on every change."""

    def __init__(self, initial: SnapshotT) -> None:
        self._snapshot = initial
        self._listeners: list[Listener[SnapshotT]] = []

    @property
    def snapshot(self) -> SnapshotT:
        return self._snapshot

    def subscribe(self, listener: Listener[SnapshotT]) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: SnapshotT) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)
