"""Login, registration and current-user endpoints.

Login and registration are sent without a bearer token so that a stale
credential can never turn a wrong password into a refresh attempt.
"""

from __future__ import annotations

from loguru import logger

from ..models.auth import AuthResponse, Credential, LoginRequest, RegisterRequest, UserDto
from .client import NutriMindClient, read_payload


async def login(client: NutriMindClient, email: str, password: str) -> AuthResponse:
    """Authenticate with email and password and store the credential.

    Raises :class:`~nutrimind.errors.ApiError` if the server refuses.
    """
    body = LoginRequest(email=email, password=password).model_dump()
    resp = await client.raw_post("/auth/login", json=body)
    auth = AuthResponse.model_validate(read_payload(resp))
    client.session.login(Credential.from_auth_response(auth), auth.user)
    return auth


async def register(client: NutriMindClient, request: RegisterRequest) -> AuthResponse:
    """Create an account; the returned credential is stored like a login."""
    resp = await client.raw_post("/auth/register", json=request.model_dump(exclude_none=True))
    auth = AuthResponse.model_validate(read_payload(resp))
    client.session.login(Credential.from_auth_response(auth), auth.user)
    logger.info(f"Registered account for {request.email}")
    return auth


async def get_current_user(client: NutriMindClient) -> UserDto:
    resp = await client.get("/auth/me")
    user = UserDto.model_validate(read_payload(resp))
    client.session.user = user
    return user


def logout(client: NutriMindClient) -> None:
    """Forget the stored credential locally."""
    client.session.logout()
