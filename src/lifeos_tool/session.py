"""Proveedores de sesion: de donde sale el usuario activo."""

from __future__ import annotations

from abc import ABC, abstractmethod

from lifeos_tool.repository import SQLiteEntryStore


class NoActiveSessionError(RuntimeError):
    """Raised when no user is signed in / configured."""


class SessionProvider(ABC):
    """Supplies the active user identity."""

    @abstractmethod
    def current_user_id(self) -> str:
        """Return the active user id.

        Raises:
            NoActiveSessionError: If there is no active user.
        """


class StaticSession(SessionProvider):
    """Session fixed to a single user id."""

    def __init__(self, user_id: str) -> None:
        self._user_id = user_id

    def current_user_id(self) -> str:
        if not self._user_id:
            raise NoActiveSessionError("Sin usuario activo")
        return self._user_id


class ConfigSession(SessionProvider):
    """Session backed by the ``user_id`` saved in the app configuration."""

    def __init__(self, store: SQLiteEntryStore) -> None:
        self._store = store

    def current_user_id(self) -> str:
        user_id = self._store.load_config().user_id.strip()
        if not user_id:
            raise NoActiveSessionError(
                "Sin usuario configurado: ejecuta 'lifeos-tool config --user-id ...'"
            )
        return user_id
