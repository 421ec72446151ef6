"""Clients that exchange a refresh token for a new credential."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx
from loguru import logger
from pydantic import ValidationError

from ..errors import RefreshError
from ..models.auth import AuthResponse, Credential, RefreshTokenRequest, unwrap_envelope

REFRESH_TOKEN_EXPIRED = "refresh_token_expired"
TRANSPORT_ERROR = "transport_error"
REFRESH_FAILED = "refresh_failed"


@runtime_checkable
class RefreshClient(Protocol):
    """Anything that can turn a refresh token into a fresh :class:`Credential`.

    Implementations raise :class:`~nutrimind.errors.RefreshError` when the
    refresh token is rejected or the exchange cannot be completed.
    """

    async def refresh(self, refresh_token: str) -> Credential: ...


class HttpRefreshClient:
    """Refresh client for the NutriMind ``POST /auth/refresh`` endpoint.

    The request body is ``{"refreshToken": ...}`` and the response is the
    usual ``{success, message, data}`` envelope around an ``AuthResponse``.

    *http* must be a client that does **not** route through the request
    pipeline, otherwise a 401 from the refresh endpoint would itself try to
    refresh.
    """

    def __init__(self, base_url: str, http: httpx.AsyncClient, path: str = "/auth/refresh") -> None:
        self.url = f"{base_url.rstrip('/')}{path}"
        self._http = http

    async def refresh(self, refresh_token: str) -> Credential:
        body = RefreshTokenRequest(refreshToken=refresh_token).model_dump()
        try:
            resp = await self._http.post(self.url, json=body)
        except httpx.TransportError as exc:
            logger.error(f"Transport error calling {self.url}: {exc!r}")
            raise RefreshError(TRANSPORT_ERROR) from exc

        try:
            data = resp.json()
        except ValueError:
            data = None
        payload, success, message = unwrap_envelope(data)

        if resp.status_code in (400, 401, 403):
            raise RefreshError(message or REFRESH_TOKEN_EXPIRED)
        if resp.is_error or not success or payload is None:
            raise RefreshError(message or REFRESH_FAILED)

        try:
            auth = AuthResponse.model_validate(payload)
        except ValidationError as exc:
            logger.error(f"Unexpected refresh response shape: {exc}")
            raise RefreshError(REFRESH_FAILED) from exc
        return Credential.from_auth_response(auth)
