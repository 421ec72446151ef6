"""Credential handling: token store, single-flight refresh and session hooks."""

from nutrimind.auth.refresh_client import HttpRefreshClient, RefreshClient
from nutrimind.auth.refresher import RefreshFailure, RefreshSuccess, SingleFlightRefresher
from nutrimind.auth.session import SessionManager
from nutrimind.auth.token_store import TokenStore

__all__ = [
    "HttpRefreshClient",
    "RefreshClient",
    "RefreshFailure",
    "RefreshSuccess",
    "SessionManager",
    "SingleFlightRefresher",
    "TokenStore",
]
