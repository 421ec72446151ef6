"""Pydantic v2 models for authentication tokens and auth endpoint payloads."""

from __future__ import annotations

import base64
import json
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def decode_jwt(token: str) -> dict | None:
    """Decode the payload of a JWT **without** verifying the signature.

    Returns ``None`` if the token cannot be decoded.
    """
    try:
        payload = token.split(".")[1]
        # Pad to a multiple of 4 for base64 decoding.
        payload += "=" * (-len(payload) % 4)
        data = json.loads(base64.urlsafe_b64decode(payload))
    except Exception:
        return None
    return data if isinstance(data, dict) else None


def jwt_expiry(token: str) -> datetime | None:
    """Return the ``exp`` claim of *token* as an aware datetime, if present."""
    decoded = decode_jwt(token)
    if not decoded or "exp" not in decoded:
        return None
    try:
        return datetime.fromtimestamp(float(decoded["exp"]), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


class Credential(BaseModel):
    """An access token paired with the refresh token that can renew it.

    Instances are immutable: the token store replaces the whole pair on
    every update, so a reader can never see a new access token next to an
    old refresh token.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str = ""
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Naive timestamps are read as UTC so comparisons never mix the two.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def bearer(self) -> str:
        return f"Bearer {self.access_token}"

    def is_expired(self, skew_seconds: float = 0.0) -> bool:
        """Return ``True`` if the token expires within *skew_seconds*.

        Credentials without a known expiry are never considered expired;
        the server's 401 is the authority for those.
        """
        if self.expires_at is None:
            return False
        now = datetime.now(timezone.utc)
        return now >= self.expires_at - timedelta(seconds=skew_seconds)

    @classmethod
    def from_auth_response(
        cls, response: AuthResponse, previous: Credential | None = None
    ) -> Credential:
        """Build a credential from an auth endpoint response.

        A missing refresh token falls back to the one in *previous*.  The
        expiry comes from ``expiresIn`` when the server sends it, otherwise
        from the JWT ``exp`` claim.
        """
        refresh_token = response.refreshToken or (
            previous.refresh_token if previous else ""
        )
        if response.expiresIn is not None:
            expires_at = datetime.now(timezone.utc) + timedelta(
                seconds=response.expiresIn
            )
        else:
            expires_at = jwt_expiry(response.token)
        return cls(
            access_token=response.token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )


class UserDto(BaseModel):
    """The authenticated user as reported by the API."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    email: str
    firstName: str = ""
    lastName: str = ""
    hasProfile: bool = False
    createdAt: str | None = None
    updatedAt: str | None = None

    @property
    def display_name(self) -> str:
        name = f"{self.firstName} {self.lastName}".strip()
        return name or self.email


class AuthResponse(BaseModel):
    """Payload returned by the login, register and refresh endpoints."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    token: str
    refreshToken: str | None = None
    user: UserDto | None = None
    expiresIn: int | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str
    firstName: str
    lastName: str
    phoneNumber: str | None = None


class RefreshTokenRequest(BaseModel):
    refreshToken: str


def unwrap_envelope(body: Any) -> tuple[Any, bool, str | None]:
    """Split a response body into ``(payload, success, message)``.

    The backend is inconsistent about casing (``data`` vs ``Data``) and
    some endpoints return the payload bare, so every shape is accepted.
    """
    if not isinstance(body, dict):
        return body, True, None
    lowered = {k.lower(): k for k in body}
    if "success" not in lowered and "data" not in lowered:
        return body, True, None
    success = bool(body.get(lowered.get("success", ""), True))
    message = body.get(lowered["message"]) if "message" in lowered else None
    payload = body.get(lowered["data"]) if "data" in lowered else None
    return payload, success, message
