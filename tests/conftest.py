"""Shared fixtures: isolated storage paths and fake collaborators."""
import asyncio

import httpx
import pytest

from nutrimind.errors import RefreshError
from nutrimind.models.auth import Credential


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Point every on-disk location at a temporary directory."""
    monkeypatch.setattr("nutrimind.storage.tokens.TOKENS_FILE", tmp_path / "tokens.json")
    monkeypatch.setattr("nutrimind.storage.config.SETTINGS_FILE", tmp_path / "settings.json")
    monkeypatch.delenv("NUTRIMIND_API_URL", raising=False)
    return tmp_path


class FakeRefreshClient:
    """Refresh client double that counts calls and can be held open."""

    def __init__(self, result=None, gate=None, delay=0.0):
        self.result = result if result is not None else Credential(access_token="T2", refresh_token="R2")
        self.gate = gate
        self.delay = delay
        self.calls = []

    async def refresh(self, refresh_token):
        self.calls.append(refresh_token)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


def failing(reason="refresh_token_expired"):
    return RefreshError(reason)


class RecordingApi:
    """MockTransport handler that accepts one bearer token and records traffic."""

    def __init__(self, valid_token="T2", status_for_valid=200):
        self.valid_token = valid_token
        self.status_for_valid = status_for_valid
        self.seen = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        auth = request.headers.get("Authorization")
        self.seen.append((request.method, request.url.path, auth, request.content))
        if auth != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"success": False, "message": "Unauthorized"})
        return httpx.Response(self.status_for_valid, json={"success": True, "data": {"path": request.url.path}})

    def count(self, token):
        return sum(1 for _, _, auth, _ in self.seen if auth == f"Bearer {token}")

