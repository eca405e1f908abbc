# src/taskflow_client/api/errors.py

"""
Transport-level failures raised by the API client.

A completed 2xx exchange never raises: business failures come back as
`ApiResponse(success=False, ...)`. Everything here is a transport problem the
caller must catch separately.
"""

from __future__ import annotations

from typing import Any

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment and try again."


class ApiError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        server_message: str | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        # the backend's `message` field from the error body, when it sent one
        self.server_message = server_message
        self.payload = payload


class TransportError(ApiError):
    """Network failure or timeout: no HTTP response at all."""


class HttpStatusError(ApiError):
    """Non-2xx response."""


class AuthError(HttpStatusError):
    """401, or an authenticated call attempted without a token."""


class RateLimitError(HttpStatusError):
    """429."""


def friendly_api_error_message(err: Exception, fallback: str) -> str:
    """
    Map an error to the text shown to the user.

    Prefers the backend's own message (`error.response.data.message` in browser terms),
    then `fallback`.
    """
    if isinstance(err, RateLimitError):
        return RATE_LIMIT_MESSAGE
    if isinstance(err, ApiError) and err.server_message:
        return err.server_message
    return fallback
