# src/taskflow_client/api/client.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.ports import TokenStorage
from .errors import ApiError, AuthError, HttpStatusError, RateLimitError, TransportError

logger = logging.getLogger(__name__)

UnauthorizedHook = Callable[[], None]


@dataclass(slots=True, frozen=True)
class ApiResponse:
    """Normalized `{success, data, message}` envelope."""

    success: bool
    data: Any = None
    message: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> ApiResponse:
        if not isinstance(payload, dict):
            return cls(success=False, message="Malformed response from server.")
        message = payload.get("message")
        return cls(
            success=bool(payload.get("success")),
            data=payload.get("data"),
            message=str(message) if message else None,
        )


def _error_body(response: httpx.Response) -> tuple[Any, str | None]:
    try:
        payload = response.json()
    except ValueError:
        return None, None
    if isinstance(payload, dict):
        msg = payload.get("message") or payload.get("error")
        return payload, (str(msg) if msg else None)
    return payload, None


def make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


class ApiClient:
    """
    Thin async wrapper over the TaskFlow REST backend.

    - 2xx -> ApiResponse (success may still be False: that's a business failure)
    - anything else -> ApiError subclass
    - authenticated calls read the bearer token from `token_storage`; a missing or
      rejected token fires the unauthorized hooks before AuthError propagates.
    """

    def __init__(
        self,
        base_url: str,
        token_storage: TokenStorage,
        *,
        timeout: httpx.Timeout | float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token_storage = token_storage
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout if timeout is not None else make_timeout(5.0, 15.0),
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._unauthorized_hooks: list[UnauthorizedHook] = []

        self.auth = AuthAPI(self)
        self.tasks = TasksAPI(self)
        self.categories = CategoriesAPI(self)
        self.users = UsersAPI(self)

    def add_unauthorized_hook(self, hook: UnauthorizedHook) -> None:
        self._unauthorized_hooks.append(hook)

    async def aclose(self) -> None:
        await self._http.aclose()

    def _fire_unauthorized(self) -> None:
        for hook in list(self._unauthorized_hooks):
            try:
                hook()
            except Exception:
                logger.exception("Unauthorized hook failed.")

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        authenticated: bool = True,
        token: str | None = None,
    ) -> ApiResponse:
        headers: dict[str, str] = {}
        if authenticated:
            bearer = token if token is not None else self._token_storage.get_token()
            if not bearer:
                logger.info("API %s %s: no token, refusing call", method, path)
                self._fire_unauthorized()
                raise AuthError("Not authenticated.", status_code=None)
            headers["Authorization"] = f"Bearer {bearer}"

        url = path.lstrip("/")
        try:
            response = await self._http.request(method, url, json=json, params=params, headers=headers)
        except httpx.TimeoutException as e:
            logger.info("API %s %s: timeout (%s)", method, path, e.__class__.__name__)
            raise TransportError("Request timed out.") from e
        except httpx.TransportError as e:
            logger.info("API %s %s: network error (%s)", method, path, e.__class__.__name__)
            raise TransportError("Network error.") from e
        except httpx.RequestError as e:
            # decoding failures, redirect loops: the exchange never completed
            logger.info("API %s %s: request failed (%s)", method, path, e.__class__.__name__)
            raise TransportError("Request failed.") from e

        status = response.status_code
        logger.debug("API %s %s -> %s", method, path, status)

        if 200 <= status < 300:
            if status == 204 or not response.content:
                return ApiResponse(success=True)
            try:
                return ApiResponse.from_payload(response.json())
            except ValueError as e:
                raise HttpStatusError(
                    "Response was not valid JSON.", status_code=status
                ) from e

        payload, server_message = _error_body(response)

        if status == 401:
            if authenticated:
                self._fire_unauthorized()
            raise AuthError(
                server_message or "Unauthorized.",
                status_code=status,
                server_message=server_message,
                payload=payload,
            )
        if status == 429:
            raise RateLimitError(
                server_message or "Too many requests.",
                status_code=status,
                server_message=server_message,
                payload=payload,
            )
        raise HttpStatusError(
            server_message or f"HTTP {status}",
            status_code=status,
            server_message=server_message,
            payload=payload,
        )


class _Resource:
    def __init__(self, client: ApiClient) -> None:
        self._client = client


class AuthAPI(_Resource):
    async def verify(self, token: str | None = None) -> ApiResponse:
        return await self._client.request("GET", "/auth/verify", token=token)

    async def login(self, email: str, password: str) -> ApiResponse:
        return await self._client.request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            authenticated=False,
        )

    async def register(self, name: str, email: str, password: str) -> ApiResponse:
        return await self._client.request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
            authenticated=False,
        )


class TasksAPI(_Resource):
    async def list(self, filters: dict[str, str] | None = None) -> ApiResponse:
        return await self._client.request("GET", "/tasks", params=dict(filters or {}))

    async def create(self, task: dict[str, Any]) -> ApiResponse:
        return await self._client.request("POST", "/tasks", json=task)

    async def update(self, task_id: int | str, partial: dict[str, Any]) -> ApiResponse:
        return await self._client.request("PUT", f"/tasks/{task_id}", json=partial)

    async def delete(self, task_id: int | str) -> ApiResponse:
        return await self._client.request("DELETE", f"/tasks/{task_id}")


class CategoriesAPI(_Resource):
    async def list(self) -> ApiResponse:
        return await self._client.request("GET", "/categories")

    async def create(self, category: dict[str, Any]) -> ApiResponse:
        return await self._client.request("POST", "/categories", json=category)

    async def update(self, category_id: int | str, partial: dict[str, Any]) -> ApiResponse:
        return await self._client.request("PUT", f"/categories/{category_id}", json=partial)

    async def delete(self, category_id: int | str) -> ApiResponse:
        return await self._client.request("DELETE", f"/categories/{category_id}")


class UsersAPI(_Resource):
    async def get_dashboard(self) -> ApiResponse:
        return await self._client.request("GET", "/users/dashboard")

    async def update_profile(self, partial: dict[str, Any]) -> ApiResponse:
        return await self._client.request("PUT", "/users/profile", json=partial)

    async def change_password(self, current_password: str, new_password: str) -> ApiResponse:
        return await self._client.request(
            "PUT",
            "/users/password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )


__all__ = ["ApiClient", "ApiError", "ApiResponse", "make_timeout"]
