"""
Authentication providers.

The stores only need to know who the current user is; how that identity
is established belongs to the provider.

Implementations:
- DemoAuthProvider: mock accounts kept in memory, for local development
- WorkspaceAuthProvider: the Databricks workspace identity the app runs
  as (or the user forwarded by the Databricks Apps proxy)
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass

from quickpay_dashboard.data.fixtures import DEMO_USER_ID
from quickpay_dashboard.errors import AuthenticationError, RemoteError
from quickpay_dashboard.lib import logs
from quickpay_dashboard.models.invoice import User

LOG = logs.logger(__file__)


@dataclass(frozen=True, slots=True)
class Session:
    """An authenticated session for a user."""

    user: User

    @property
    def user_id(self) -> str:
        return self.user.id


class AuthProvider(ABC):
    """
    Abstract base class for authentication.

    ``current_session`` never raises for "not signed in"; it returns None.
    The other methods raise AuthenticationError for bad credentials and
    RemoteError for provider failures.
    """

    @abstractmethod
    async def current_session(self) -> Session | None:
        """Return the active session, or None."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Sign in and return the new session."""

    @abstractmethod
    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        """Create an account and return its session."""

    @abstractmethod
    async def sign_out(self) -> None:
        """End the active session."""

    async def reset_password(self, email: str) -> None:
        raise RemoteError("Password reset is not supported by this provider")

    async def update_password(self, new_password: str) -> None:
        raise RemoteError("Password change is not supported by this provider")

    async def current_user_id(self) -> str | None:
        """Return the signed-in user's id, or None."""
        session = await self.current_session()
        return session.user_id if session else None


class DemoAuthProvider(AuthProvider):
    """
    In-memory mock accounts.

    Any non-empty email/password signs in as the demo user (id "1"), which
    owns the fixture invoices.

    Args:
        signed_in: Start with the demo user already signed in.
    """

    def __init__(self, signed_in: bool = True, user_id: str = DEMO_USER_ID) -> None:
        self._user_id = user_id
        self._session: Session | None = (
            Session(User(id=user_id, email="demo@publicnote.com")) if signed_in else None
        )

    async def current_session(self) -> Session | None:
        return self._session

    async def sign_in(self, email: str, password: str) -> Session:
        if not email or not password:
            raise AuthenticationError("Email and password are required")
        self._session = Session(User(id=self._user_id, email=email.strip().lower()))
        LOG.info("Demo sign in: %s", self._session.user.email)
        return self._session

    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        session = await self.sign_in(email, password)
        self._session = Session(
            User(id=session.user.id, email=session.user.email, full_name=full_name)
        )
        return self._session

    async def sign_out(self) -> None:
        self._session = None

    async def reset_password(self, email: str) -> None:
        LOG.info("Demo password reset requested for %s", email)

    async def update_password(self, new_password: str) -> None:
        if self._session is None:
            raise AuthenticationError()


class WorkspaceAuthProvider(AuthProvider):
    """
    Identity taken from the Databricks workspace.

    The user is resolved once through ``current_user.me()`` and cached.
    Credentials are managed by the workspace, so sign in re-resolves the
    identity and sign up is unsupported.
    """

    def __init__(self) -> None:
        self._session: Session | None = None
        self._signed_out = False

    def _resolve(self) -> Session:
        from quickpay_dashboard.lib import clients

        me = clients.workspace_client().current_user.me()
        email = me.user_name
        if me.emails:
            email = me.emails[0].value or email
        return Session(
            User(id=str(me.id), email=email, full_name=me.display_name)
        )

    async def current_session(self) -> Session | None:
        if self._signed_out:
            return None
        if self._session is None:
            try:
                self._session = await asyncio.get_running_loop().run_in_executor(
                    None, self._resolve
                )
            except Exception as exc:
                LOG.warning("Unable to resolve workspace user", exc_info=True)
                raise RemoteError.from_exception(exc) from exc
        return self._session

    async def sign_in(self, email: str, password: str) -> Session:
        self._signed_out = False
        self._session = None
        session = await self.current_session()
        if session is None:
            raise AuthenticationError()
        return session

    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        raise RemoteError("Accounts are managed by the Databricks workspace")

    async def sign_out(self) -> None:
        self._session = None
        self._signed_out = True
