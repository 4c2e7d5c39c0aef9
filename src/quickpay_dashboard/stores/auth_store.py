"""
Auth store: the current user and the status of auth requests.
"""

from typing import Any, Awaitable, Callable

from quickpay_dashboard.errors import QuickPayError
from quickpay_dashboard.lib import logs
from quickpay_dashboard.models.common import AuthStoreState
from quickpay_dashboard.services.auth import AuthProvider, Session
from quickpay_dashboard.stores.base import ObservableStore

LOG = logs.logger(__file__)


class AuthStore(ObservableStore[AuthStoreState]):
    """
    Observable auth state over an AuthProvider.

    Every action returns True on success. Failures are stored in ``error``
    and the action returns False; the previous user is kept.
    """

    ACTIONS = frozenset(
        {
            "initialize_auth",
            "sign_in",
            "sign_up",
            "sign_out",
            "reset_password",
            "update_password",
            "clear_error",
        }
    )

    def __init__(self, provider: AuthProvider) -> None:
        self._provider = provider
        super().__init__(AuthStoreState())

    async def _run(
        self,
        action: str,
        call: Callable[[], Awaitable[Any]],
        on_success: Callable[[Any], dict[str, Any]] | None = None,
    ) -> bool:
        self._set(is_loading=True, error=None)
        try:
            result = await call()
        except QuickPayError as exc:
            LOG.warning("Auth %s failed: %s", action, exc.message)
            self._set(is_loading=False, error=exc.message)
            return False
        changes = on_success(result) if on_success else {}
        self._set(is_loading=False, **changes)
        return True

    @staticmethod
    def _session_user(session: Session | None) -> dict[str, Any]:
        return {"user": session.user if session else None}

    async def initialize_auth(self) -> bool:
        """Load the existing session, if any."""
        return await self._run(
            "initialize", self._provider.current_session, self._session_user
        )

    async def sign_in(self, email: str, password: str) -> bool:
        return await self._run(
            "sign_in",
            lambda: self._provider.sign_in(email, password),
            self._session_user,
        )

    async def sign_up(self, email: str, password: str, full_name: str) -> bool:
        return await self._run(
            "sign_up",
            lambda: self._provider.sign_up(email, password, full_name),
            self._session_user,
        )

    async def sign_out(self) -> bool:
        return await self._run(
            "sign_out", self._provider.sign_out, lambda _: {"user": None}
        )

    async def reset_password(self, email: str) -> bool:
        return await self._run(
            "reset_password", lambda: self._provider.reset_password(email)
        )

    async def update_password(self, new_password: str) -> bool:
        return await self._run(
            "update_password", lambda: self._provider.update_password(new_password)
        )

    def clear_error(self) -> None:
        self._set(error=None)
