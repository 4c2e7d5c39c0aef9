"""
Tests for the auth store and auth providers.
"""

from __future__ import annotations

import pytest

from quickpay_dashboard.errors import RemoteError
from quickpay_dashboard.models.invoice import User
from quickpay_dashboard.services.auth import DemoAuthProvider, Session, WorkspaceAuthProvider
from quickpay_dashboard.stores.auth_store import AuthStore


class TestAuthStore:
    """Tests for AuthStore over the demo provider"""

    @pytest.mark.asyncio
    async def test_initialize_loads_existing_session(self) -> None:
        store = AuthStore(DemoAuthProvider())
        assert await store.initialize_auth()
        assert store.get_state().user_id == "1"
        assert store.get_state().is_authenticated

    @pytest.mark.asyncio
    async def test_initialize_without_session(self) -> None:
        store = AuthStore(DemoAuthProvider(signed_in=False))
        assert await store.initialize_auth()
        assert not store.get_state().is_authenticated

    @pytest.mark.asyncio
    async def test_sign_in_and_out(self) -> None:
        store = AuthStore(DemoAuthProvider(signed_in=False))
        assert await store.sign_in(" Demo@PublicNote.com", "secret")
        assert store.get_state().user.email == "demo@publicnote.com"
        assert await store.sign_out()
        assert store.get_state().user is None

    @pytest.mark.asyncio
    async def test_failed_sign_in_sets_error(self) -> None:
        store = AuthStore(DemoAuthProvider(signed_in=False))
        assert not await store.sign_in("", "")
        state = store.get_state()
        assert state.error == "Email and password are required"
        assert not state.is_loading
        store.clear_error()
        assert store.get_state().error is None

    @pytest.mark.asyncio
    async def test_sign_up_keeps_full_name(self) -> None:
        store = AuthStore(DemoAuthProvider(signed_in=False))
        assert await store.sign_up("new@example.com", "pw", "New Person")
        assert store.get_state().user.full_name == "New Person"

    @pytest.mark.asyncio
    async def test_update_password_requires_session(self) -> None:
        store = AuthStore(DemoAuthProvider(signed_in=False))
        assert not await store.update_password("pw")
        assert store.get_state().error == "User not authenticated"

    @pytest.mark.asyncio
    async def test_dispatch(self) -> None:
        store = AuthStore(DemoAuthProvider())
        assert await store.dispatch("reset_password", "demo@publicnote.com")
        with pytest.raises(ValueError):
            store.dispatch("delete_account")


class TestWorkspaceAuthProvider:
    """Tests for the workspace identity provider"""

    @pytest.mark.asyncio
    async def test_resolves_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        provider = WorkspaceAuthProvider()
        calls: list[int] = []

        def resolve() -> Session:
            calls.append(1)
            return Session(User(id="42", email="me@example.com"))

        monkeypatch.setattr(provider, "_resolve", resolve)
        assert await provider.current_user_id() == "42"
        assert await provider.current_user_id() == "42"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_failure_is_remote_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        provider = WorkspaceAuthProvider()

        def resolve() -> Session:
            raise PermissionError("token expired")

        monkeypatch.setattr(provider, "_resolve", resolve)
        with pytest.raises(RemoteError, match="token expired"):
            await provider.current_session()

    @pytest.mark.asyncio
    async def test_sign_out_and_unsupported_flows(self, monkeypatch: pytest.MonkeyPatch) -> None:
        provider = WorkspaceAuthProvider()
        monkeypatch.setattr(provider, "_resolve", lambda: Session(User(id="42")))
        await provider.sign_out()
        assert await provider.current_session() is None
        with pytest.raises(RemoteError):
            await provider.sign_up("a@b.co", "pw", "A")
        with pytest.raises(RemoteError):
            await provider.reset_password("a@b.co")
