"""Single-flight coordination of access-token refreshes.

Any number of coroutines may ask for a refresh at the same time.  The
first demand while idle starts a *refresh episode*: one call to the
refresh client, run as its own task.  Every demand that arrives before
the episode settles awaits the same outcome instead of calling the
refresh client again.

The state goes back to idle before the shared outcome is resolved, so a
demand that arrives after settlement always starts a new episode rather
than picking up a stale (possibly failed) result.

Outcomes are values (:class:`RefreshSuccess` or :class:`RefreshFailure`),
never exceptions set on the shared future.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Union

from loguru import logger

from ..errors import RefreshError
from ..models.auth import Credential
from .refresh_client import RefreshClient
from .token_store import TokenStore

NO_REFRESH_TOKEN = "no_refresh_token"
CANCELLED = "cancelled"


@dataclass(frozen=True)
class RefreshSuccess:
    credential: Credential


@dataclass(frozen=True)
class RefreshFailure:
    reason: str


RefreshOutcome = Union[RefreshSuccess, RefreshFailure]


class _Idle:
    __slots__ = ()

    def __repr__(self) -> str:
        return "Idle"


@dataclass
class _Refreshing:
    outcome: asyncio.Future
    task: asyncio.Task | None = None


IDLE = _Idle()


class SingleFlightRefresher:
    """Deduplicate concurrent refresh demand into one refresh-client call.

    Parameters
    ----------
    store:
        The token store the refresh credential is read from and the result
        is written to.  Success replaces the pair; failure clears it.
    client:
        Any object implementing :class:`RefreshClient`.
    """

    def __init__(self, store: TokenStore, client: RefreshClient) -> None:
        self._store = store
        self._client = client
        self._state: _Idle | _Refreshing = IDLE
        self._episodes = 0

    @property
    def is_refreshing(self) -> bool:
        return isinstance(self._state, _Refreshing)

    @property
    def episodes(self) -> int:
        """Number of refresh episodes started so far."""
        return self._episodes

    async def request_refresh(self) -> RefreshOutcome:
        """Join the current refresh episode, starting one if idle.

        Cancelling the caller only detaches that caller; the episode keeps
        running for everyone else.
        """
        state = self._state
        if isinstance(state, _Refreshing):
            logger.debug("Joining in-flight token refresh")
            outcome = state.outcome
        else:
            outcome = self._start_episode()
        return await asyncio.shield(outcome)

    def _start_episode(self) -> asyncio.Future:
        # No await between the IDLE check in request_refresh and this point.
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future = loop.create_future()
        state = _Refreshing(outcome=outcome)
        self._state = state
        self._episodes += 1
        credential = self._store.current()
        logger.debug(f"Starting token refresh episode #{self._episodes}")

        task = loop.create_task(self._run(credential, state))
        task.add_done_callback(lambda t: self._on_task_done(t, state))
        state.task = task
        return outcome

    async def _run(self, credential: Credential | None, state: _Refreshing) -> None:
        result = await self._call_client(credential)
        self._settle(state, result)

    async def _call_client(self, credential: Credential | None) -> RefreshOutcome:
        if credential is None or not credential.refresh_token:
            logger.warning("Token refresh requested without a refresh token")
            return RefreshFailure(NO_REFRESH_TOKEN)
        try:
            new_credential = await self._client.refresh(credential.refresh_token)
        except RefreshError as exc:
            logger.error(f"Token refresh rejected: {exc.reason}")
            return RefreshFailure(exc.reason)
        except Exception as exc:
            logger.error(f"Token refresh failed: {exc!r}")
            return RefreshFailure(str(exc) or type(exc).__name__)

        if not new_credential.refresh_token:
            new_credential = new_credential.model_copy(
                update={"refresh_token": credential.refresh_token}
            )
        return RefreshSuccess(new_credential)

    def _settle(self, state: _Refreshing, result: RefreshOutcome) -> None:
        if state.outcome.done():
            return
        try:
            if isinstance(result, RefreshSuccess):
                self._store.set(result.credential)
                logger.debug("Access token refreshed successfully")
            elif result.reason != CANCELLED:
                self._store.clear()
        except Exception as exc:
            logger.exception(f"Failed to update token store after refresh: {exc}")
        finally:
            if self._state is state:
                self._state = IDLE
            state.outcome.set_result(result)

    def _on_task_done(self, task: asyncio.Task, state: _Refreshing) -> None:
        # Covers a task cancelled before it ever ran, or one that died
        # unexpectedly; the normal path has already settled.
        if task.cancelled():
            self._settle(state, RefreshFailure(CANCELLED))
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Token refresh task crashed: {exc!r}")
            self._settle(state, RefreshFailure(str(exc) or type(exc).__name__))

    async def aclose(self) -> None:
        """Cancel an outstanding episode.

        Waiters resolve with ``RefreshFailure("cancelled")`` and the stored
        credential is left untouched.
        """
        state = self._state
        if isinstance(state, _Refreshing) and state.task is not None:
            state.task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await state.task
