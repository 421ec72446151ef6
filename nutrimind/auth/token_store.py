"""In-memory holder of the current credential pair."""

from __future__ import annotations

from typing import Callable

from loguru import logger

from ..models.auth import Credential
from ..storage.tokens import delete_tokens, load_tokens, save_tokens

Listener = Callable[[Credential | None], None]


class TokenStore:
    """Holds the current :class:`Credential`, replaced as a whole value.

    Reads never block and never suspend.  ``Credential`` is immutable, so
    swapping the single reference is enough to guarantee that readers see
    either the previous pair or the new one.

    With ``persist=True`` the saved credential is loaded on construction and
    every :meth:`set` / :meth:`clear` is mirrored to disk.
    """

    def __init__(self, credential: Credential | None = None, persist: bool = False) -> None:
        self._persist = persist
        if credential is None and persist:
            credential = load_tokens()
        self._credential: Credential | None = credential
        self._listeners: list[Listener] = []

    def current(self) -> Credential | None:
        return self._credential

    @property
    def is_authenticated(self) -> bool:
        return self._credential is not None and self._credential.access_token != ""

    def set(self, credential: Credential) -> None:
        """Replace the current pair with *credential*."""
        self._credential = credential
        if self._persist:
            save_tokens(credential)
        self._notify(credential)

    def clear(self) -> None:
        """Forget the current pair (logout)."""
        self._credential = None
        if self._persist:
            delete_tokens()
        self._notify(None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every change.  Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, credential: Credential | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(credential)
            except Exception as exc:
                logger.error(f"Token store listener {listener!r} failed: {exc}")
