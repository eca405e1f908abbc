# src/taskflow_client/views/profile.py

from __future__ import annotations

import logging

from ..api.client import ApiClient
from ..api.errors import ApiError, friendly_api_error_message
from ..core.ports import Notifier
from ..core.scope import ViewScope
from ..forms import validate_password_change, validate_profile
from ..session.store import SessionStore

logger = logging.getLogger(__name__)


class ProfileView:
    def __init__(
        self,
        api: ApiClient,
        session: SessionStore,
        notifier: Notifier,
        *,
        scope: ViewScope | None = None,
    ) -> None:
        self._api = api
        self._session = session
        self._notifier = notifier
        self._scope = scope or ViewScope("profile")

    async def update_profile(self, name: str, email: str, avatar_url: str | None = None) -> bool:
        """Persist the change server-side, then merge the returned user into the session."""
        payload = validate_profile(name, email, avatar_url)
        try:
            response = await self._scope.run(self._api.users.update_profile(payload))
        except ApiError as e:
            self._notifier.error(friendly_api_error_message(e, "Failed to update profile"))
            return False
        if not response.success:
            self._notifier.error(response.message or "Failed to update profile")
            return False

        updated = response.data if isinstance(response.data, dict) else payload
        self._session.update_user(updated)
        logger.info("Profile updated (fields=%s)", ",".join(sorted(payload)))
        self._notifier.success("Profile updated successfully")
        return True

    async def change_password(self, current_password: str, new_password: str, confirm_password: str) -> bool:
        payload = validate_password_change(current_password, new_password, confirm_password)
        try:
            response = await self._scope.run(
                self._api.users.change_password(payload["currentPassword"], payload["newPassword"])
            )
        except ApiError as e:
            self._notifier.error(friendly_api_error_message(e, "Failed to update password"))
            return False
        if not response.success:
            self._notifier.error(response.message or "Failed to update password")
            return False
        logger.info("Password changed.")
        self._notifier.success("Password updated successfully")
        return True

    async def close(self) -> None:
        await self._scope.close()
