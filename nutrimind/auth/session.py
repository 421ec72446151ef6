"""Session manager: reacts to login, logout and failed refreshes."""

from __future__ import annotations

from typing import Callable

from loguru import logger

from ..errors import AuthRefreshFailed
from ..models.auth import Credential, UserDto
from .token_store import TokenStore

LogoutCallback = Callable[[str], None]


class SessionManager:
    """Owns the user-visible consequences of authentication changes.

    The request pipeline only reports :class:`AuthRefreshFailed`; this class
    turns that into a logout and tells subscribers (a CLI, a UI) why.  A
    failed refresh episode fails every waiting request, but subscribers are
    notified once per session.
    """

    def __init__(self, store: TokenStore) -> None:
        self.store = store
        self.user: UserDto | None = None
        self._active = store.is_authenticated
        self._on_logout: list[LogoutCallback] = []

    @property
    def is_logged_in(self) -> bool:
        return self.store.is_authenticated

    def on_logout(self, callback: LogoutCallback) -> None:
        """Register *callback* to be called with the logout reason."""
        self._on_logout.append(callback)

    def login(self, credential: Credential, user: UserDto | None = None) -> None:
        self.store.set(credential)
        self.user = user
        self._active = True
        logger.info(f"Logged in{f' as {user.email}' if user else ''}")

    def logout(self, reason: str = "user_logout") -> None:
        """Clear the credential and notify subscribers."""
        self.store.clear()
        self.user = None
        was_active, self._active = self._active, False
        if not was_active:
            return
        logger.info(f"Logged out ({reason})")
        for callback in list(self._on_logout):
            try:
                callback(reason)
            except Exception as exc:
                logger.error(f"Logout callback {callback!r} failed: {exc}")

    def handle_refresh_failure(self, error: AuthRefreshFailed) -> None:
        if self._active:
            logger.warning(f"Session ended, token refresh failed: {error.reason}")
        self.logout(error.reason)
