"""Per-request authentication: attach the bearer token, recover from 401.

:class:`RequestPipeline` sits between the high-level client and
``httpx.AsyncClient.send``.  For each request it:

1. attaches ``Authorization: Bearer <token>`` from the token store;
2. dispatches the request;
3. on a 401, joins (or starts) a single-flight refresh episode and
   replays the request once with the new token.

A request is replayed at most once.  A 401 on the replay raises
:class:`~nutrimind.errors.AuthExpired` instead of refreshing again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import httpx
from loguru import logger

from ..auth.refresher import CANCELLED, RefreshFailure, SingleFlightRefresher
from ..auth.token_store import TokenStore
from ..errors import AuthExpired, AuthRefreshFailed
from ..models.auth import Credential

UNAUTHORIZED = 401

RefreshFailedHook = Callable[[AuthRefreshFailed], None]


@dataclass
class PendingRequest:
    """An outgoing request and whether it has already been replayed."""

    request: httpx.Request
    retried: bool = False

    def authorize(self, credential: Credential | None) -> None:
        if credential is not None and credential.access_token:
            self.request.headers["Authorization"] = credential.bearer

    @property
    def label(self) -> str:
        return f"{self.request.method} {self.request.url}"


class RequestPipeline:
    """Send requests with the current credential and a one-shot 401 recovery.

    Parameters
    ----------
    http:
        The ``httpx.AsyncClient`` used for dispatch.
    store:
        Source of the bearer token.
    refresher:
        Shared single-flight refresher; every pipeline talking to the same
        API must use the same instance.
    refresh_skew_seconds:
        Credentials whose ``expires_at`` falls within this window are
        refreshed before dispatch.  ``None`` disables the check.
    on_refresh_failed:
        Called with the error before :class:`AuthRefreshFailed` is raised,
        except when the refresh was cancelled by shutdown.  Typically
        :meth:`SessionManager.handle_refresh_failure`.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        store: TokenStore,
        refresher: SingleFlightRefresher,
        refresh_skew_seconds: float | None = 30.0,
        on_refresh_failed: RefreshFailedHook | None = None,
    ) -> None:
        self._http = http
        self._store = store
        self._refresher = refresher
        self.refresh_skew_seconds = refresh_skew_seconds
        self._on_refresh_failed = on_refresh_failed

    async def send(self, request: httpx.Request, **kwargs: Any) -> httpx.Response:
        """Dispatch *request*, refreshing the credential at most once.

        Non-401 responses (including 5xx) are returned unchanged.  Transport
        errors propagate as raised by httpx.
        """
        pending = PendingRequest(request)
        credential = await self._fresh_credential()

        while True:
            pending.authorize(credential)
            response = await self._http.send(pending.request, **kwargs)
            if response.status_code != UNAUTHORIZED or credential is None:
                return response

            await response.aclose()
            if pending.retried:
                logger.warning(f"{pending.label} rejected again after token refresh")
                raise AuthExpired(pending.request.method, str(pending.request.url))
            pending.retried = True
            credential = await self._recover(pending, credential)

    async def _fresh_credential(self) -> Credential | None:
        credential = self._store.current()
        if (
            credential is None
            or self.refresh_skew_seconds is None
            or not credential.is_expired(self.refresh_skew_seconds)
        ):
            return credential
        logger.debug("Access token is about to expire, refreshing before dispatch")
        return await self._refresh()

    async def _recover(self, pending: PendingRequest, rejected: Credential) -> Credential:
        current = self._store.current()
        if current is not None and current.access_token != rejected.access_token:
            # Another episode replaced the token while this request was in flight.
            logger.debug(f"{pending.label} used a superseded token, replaying")
            return current
        logger.debug(f"{pending.label} got 401, waiting for token refresh")
        return await self._refresh()

    async def _refresh(self) -> Credential:
        outcome = await self._refresher.request_refresh()
        if isinstance(outcome, RefreshFailure):
            error = AuthRefreshFailed(outcome.reason)
            # Cancelled on shutdown: the stored credential is still valid.
            if outcome.reason != CANCELLED and self._on_refresh_failed is not None:
                self._on_refresh_failed(error)
            raise error
        return outcome.credential
