"""Tests for the in-memory token store and its disk mirroring."""
import asyncio
from unittest.mock import MagicMock, patch

import pytest

from nutrimind.auth.token_store import TokenStore
from nutrimind.models.auth import Credential


class TestTokenStore:
    def test_empty_by_default(self):
        store = TokenStore()
        assert store.current() is None
        assert not store.is_authenticated

    def test_set_is_visible_immediately(self):
        store = TokenStore()
        cred = Credential(access_token="a", refresh_token="r")
        store.set(cred)
        assert store.current() is cred
        assert store.is_authenticated

    def test_clear(self):
        store = TokenStore(Credential(access_token="a", refresh_token="r"))
        store.clear()
        assert store.current() is None

    def test_listeners_notified_and_unsubscribed(self):
        store = TokenStore()
        listener = MagicMock()
        unsubscribe = store.subscribe(listener)

        cred = Credential(access_token="a", refresh_token="r")
        store.set(cred)
        store.clear()
        unsubscribe()
        store.set(cred)

        assert [c.args[0] for c in listener.call_args_list] == [cred, None]

    def test_failing_listener_does_not_break_set(self):
        store = TokenStore()
        store.subscribe(MagicMock(side_effect=RuntimeError("listener bug")))
        store.set(Credential(access_token="a", refresh_token="r"))
        assert store.current().access_token == "a"

    @pytest.mark.asyncio
    async def test_readers_never_see_a_torn_pair(self):
        store = TokenStore(Credential(access_token="A0", refresh_token="R0"))
        observed = []

        async def writer():
            for i in range(1, 200):
                store.set(Credential(access_token=f"A{i}", refresh_token=f"R{i}"))
                await asyncio.sleep(0)

        async def reader():
            for _ in range(200):
                cred = store.current()
                observed.append((cred.access_token[1:], cred.refresh_token[1:]))
                await asyncio.sleep(0)

        await asyncio.gather(writer(), reader(), reader())

        assert observed
        assert all(access == refresh for access, refresh in observed)

    def test_credential_is_immutable(self):
        cred = Credential(access_token="a", refresh_token="r")
        with pytest.raises(Exception):
            cred.access_token = "b"


class TestPersistentTokenStore:
    def test_loads_saved_credential(self):
        saved = Credential(access_token="disk", refresh_token="r")
        with patch("nutrimind.auth.token_store.load_tokens", return_value=saved):
            store = TokenStore(persist=True)
        assert store.current() == saved

    def test_set_and_clear_mirror_to_disk(self):
        with patch("nutrimind.auth.token_store.load_tokens", return_value=None), \
                patch("nutrimind.auth.token_store.save_tokens") as mock_save, \
                patch("nutrimind.auth.token_store.delete_tokens") as mock_delete:
            store = TokenStore(persist=True)
            cred = Credential(access_token="a", refresh_token="r")
            store.set(cred)
            store.clear()
            mock_save.assert_called_once_with(cred)
            mock_delete.assert_called_once_with()

    def test_memory_only_store_never_touches_disk(self):
        with patch("nutrimind.auth.token_store.load_tokens") as mock_load, \
                patch("nutrimind.auth.token_store.save_tokens") as mock_save:
            store = TokenStore()
            store.set(Credential(access_token="a", refresh_token="r"))
            mock_load.assert_not_called()
            mock_save.assert_not_called()

    def test_round_trip_through_real_file(self, isolated_storage):
        store = TokenStore(persist=True)
        store.set(Credential(access_token="a", refresh_token="r"))
        assert (isolated_storage / "tokens.json").exists()
        assert TokenStore(persist=True).current().access_token == "a"
