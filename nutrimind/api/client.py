"""Async HTTP client for the NutriMind API with automatic token refresh."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from ..auth.refresh_client import HttpRefreshClient, RefreshClient
from ..auth.refresher import SingleFlightRefresher
from ..auth.session import SessionManager
from ..auth.token_store import TokenStore
from ..errors import ApiError
from ..models.auth import unwrap_envelope
from ..storage.config import AppSettings
from .pipeline import RequestPipeline


async def _log_request(request: httpx.Request) -> None:
    # Never log the Authorization header.
    logger.debug(f"HTTP {request.method} {request.url}")


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug(f"HTTP {response.status_code} for {request.method} {request.url}")


def read_payload(resp: httpx.Response) -> Any:
    """Return the payload of an API response, unwrapped from its envelope.

    Raises :class:`ApiError` for non-2xx statuses and for envelopes with
    ``success: false``.
    """
    try:
        body = resp.json()
    except ValueError:
        body = None
    payload, success, message = unwrap_envelope(body)
    if resp.is_error:
        raise ApiError(resp.status_code, message)
    if not success:
        raise ApiError(resp.status_code, message or "Request was not successful")
    return payload


class NutriMindClient:
    """Async client with single-flight token refresh.

    Every request made through the HTTP verbs goes through a
    :class:`RequestPipeline`: the current bearer token is attached, and a
    401 triggers at most one shared refresh before the request is replayed.

    Settings not passed explicitly come from :class:`AppSettings`.

    Example::

        async with NutriMindClient() as client:
            resp = await client.get("/mealplans", params={"week": "2025-W09"})
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        refresh_client: RefreshClient | None = None,
        timeout: float | None = None,
        refresh_skew_seconds: float | None = None,
        persist_tokens: bool | None = None,
    ) -> None:
        settings = AppSettings.load()
        self.base_url = (base_url or settings["api_url"]).rstrip("/")
        if persist_tokens is None:
            persist_tokens = bool(settings["persist_tokens"])
        if refresh_skew_seconds is None:
            refresh_skew_seconds = float(settings["refresh_skew_seconds"])

        self.store = store if store is not None else TokenStore(persist=persist_tokens)
        self.session = SessionManager(self.store)
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=timeout if timeout is not None else float(settings["timeout_seconds"]),
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )
        if refresh_client is None:
            refresh_client = HttpRefreshClient(self.base_url, self._http)
        self.refresher = SingleFlightRefresher(self.store, refresh_client)
        self.pipeline = RequestPipeline(
            self._http,
            self.store,
            self.refresher,
            refresh_skew_seconds=refresh_skew_seconds,
            on_refresh_failed=self.session.handle_refresh_failure,
        )

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        """Return ``True`` if an access token is available."""
        return self.store.is_authenticated

    @property
    def access_token(self) -> str | None:
        credential = self.store.current()
        return credential.access_token if credential else None

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Authenticated HTTP verbs (prefixed with base_url)
    # ------------------------------------------------------------------

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send an authenticated request through the refresh pipeline."""
        request = self._http.build_request(method, self.url(path), **kwargs)
        return await self.pipeline.send(request)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------
    # Unauthenticated helpers (login, register)
    # ------------------------------------------------------------------

    async def raw_request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request without a bearer token and without 401 recovery."""
        return await self._http.request(method, self.url(path), **kwargs)

    async def raw_post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.raw_request("POST", path, **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Cancel any outstanding refresh and close the HTTP transport."""
        await self.refresher.aclose()
        await self._http.aclose()

    async def __aenter__(self) -> NutriMindClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
