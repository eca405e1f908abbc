# src/taskflow_client/session/store.py

"""
Session store: the single source of truth for "is someone logged in, and as whom".

States:
- INITIALIZING: until initialize() finishes (reads the stored token and verifies it)
- ANONYMOUS: no user, no token; login()/register() are the only ways out
- AUTHENTICATED: user + token; logout() or a rejected token goes back to ANONYMOUS

`user` and `token` are always set and cleared together.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any

from ..api.client import ApiClient, ApiResponse
from ..api.errors import ApiError, friendly_api_error_message
from ..core.ports import Notifier, TokenStorage
from .session_models import AuthResult, Session, SessionStatus, User

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."


class SessionStore:
    def __init__(self, api: ApiClient, token_storage: TokenStorage, notifier: Notifier) -> None:
        self._api = api
        self._storage = token_storage
        self._notifier = notifier
        self._session = Session(user=None, token=None, loading=True)
        self._initialized = False

        api.add_unauthorized_hook(self.handle_unauthorized)

    # ---- read side ----

    @property
    def user(self) -> User | None:
        return self._session.user

    @property
    def token(self) -> str | None:
        return self._session.token

    @property
    def loading(self) -> bool:
        return self._session.loading

    @property
    def status(self) -> SessionStatus:
        if not self._initialized:
            return SessionStatus.INITIALIZING
        if self._session.user is not None:
            return SessionStatus.AUTHENTICATED
        return SessionStatus.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    # ---- transitions ----

    async def initialize(self) -> SessionStatus:
        """Verify a stored token, if any. Any failure ends ANONYMOUS with the token cleared."""
        try:
            token = self._storage.get_token()
            if not token:
                logger.info("No stored token; starting anonymous.")
                return SessionStatus.ANONYMOUS

            try:
                response = await self._api.auth.verify(token)
            except ApiError as e:
                logger.info("Token verification failed (%s); clearing token.", e.__class__.__name__)
                self._clear()
                return SessionStatus.ANONYMOUS

            user_raw = _user_payload(response)
            if not response.success or user_raw is None:
                logger.info("Token verification rejected: %s", response.message)
                self._clear()
                return SessionStatus.ANONYMOUS

            self._set(token, User.from_api(user_raw))
            logger.info("Session restored for user id=%s", self._session.user.id if self._session.user else None)
            return SessionStatus.AUTHENTICATED
        except Exception:
            logger.exception("Session restore failed; clearing token.")
            self._clear()
            return SessionStatus.ANONYMOUS
        finally:
            self._initialized = True
            self._session.loading = False

    async def login(self, email: str, password: str) -> AuthResult:
        return await self._authenticate(
            self._api.auth.login(email, password),
            success_text="Welcome back!",
            failure_text="Login failed",
        )

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        return await self._authenticate(
            self._api.auth.register(name, email, password),
            success_text="Account created successfully!",
            failure_text="Registration failed",
        )

    def logout(self) -> None:
        self._clear()
        logger.info("Logged out.")
        self._notifier.success("Logged out successfully")

    def update_user(self, partial: dict[str, Any]) -> User | None:
        """
        Merge fields into the cached user without a round trip.

        The caller must already have persisted the change server-side.
        """
        if self._session.user is None:
            logger.debug("update_user ignored: no user in session")
            return None
        self._session.user = self._session.user.merged(partial)
        return self._session.user

    def handle_unauthorized(self) -> None:
        """Called by the API client when an authenticated call is rejected or has no token."""
        was_authenticated = self._session.user is not None
        self._clear()
        if was_authenticated:
            logger.info("Authenticated call rejected; session cleared.")
            self._notifier.error(SESSION_EXPIRED_MESSAGE)

    # ---- internals ----

    async def _authenticate(
        self, call: Awaitable[ApiResponse], *, success_text: str, failure_text: str
    ) -> AuthResult:
        # NOTE: concurrent attempts are not deduplicated; the last one to resolve wins.
        self._session.loading = True
        try:
            try:
                response = await call
            except ApiError as e:
                message = friendly_api_error_message(e, failure_text)
                logger.info("%s: %s", failure_text, e)
                self._notifier.error(message)
                return AuthResult(success=False, message=message)

            data = response.data if isinstance(response.data, dict) else {}
            token = data.get("token")
            user_raw = data.get("user")
            if not response.success or not token or not isinstance(user_raw, dict):
                message = response.message or failure_text
                logger.info("%s: %s", failure_text, message)
                self._notifier.error(message)
                return AuthResult(success=False, message=message)

            self._set(str(token), User.from_api(user_raw))
            self._notifier.success(success_text)
            return AuthResult(success=True)
        finally:
            self._session.loading = False

    def _set(self, token: str, user: User) -> None:
        self._storage.set_token(token)
        self._session.token = token
        self._session.user = user

    def _clear(self) -> None:
        self._storage.remove_token()
        self._session.token = None
        self._session.user = None


def _user_payload(response: ApiResponse) -> dict[str, Any] | None:
    data = response.data
    if isinstance(data, dict):
        user = data.get("user")
        if isinstance(user, dict):
            return user
    return None
