"""
Levee SDK error taxonomy.

Streaming errors (ConnectionError, ProtocolError, RemoteError, TimeoutError)
and HTTP API errors classified by status code share the LeveeError base.
"""

from typing import Mapping, Optional


class LeveeError(Exception):
    """Base exception for all Levee SDK errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def user_friendly_message(self) -> str:
        """Returns a user-friendly error message."""
        return self.message


# ============================================================================
# Streaming Errors
# ============================================================================


class ConnectionError(LeveeError):
    """Transport unreachable or misconfigured (bad address, bad credentials)."""

    def user_friendly_message(self) -> str:
        return (
            f"[ERROR] Unable to connect to the Levee service\n\n"
            f"Error: {self.message}\n\n"
            f"Suggestions:\n"
            f"  1. Check the --grpc-address / LEVEE_GRPC_ADDRESS value\n"
            f"  2. Check that LEVEE_API_KEY is set\n"
            f"  3. Check your network connection"
        )


class ProtocolError(LeveeError):
    """Session state-machine violation (double start, missing completion)."""


class RemoteError(LeveeError):
    """The remote chat service reported an error frame."""

    def __init__(self, code: str, message: str, retryable: bool = False):
        self.code = code
        self.retryable = retryable
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def user_friendly_message(self) -> str:
        hint = " (retryable)" if self.retryable else ""
        return f"[REMOTE ERROR] {self.code}{hint}\n\nError: {self.message}"


class StreamAbortedError(RemoteError):
    """The session ended with an aborted event instead of a completion."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__("aborted", reason or "Generation aborted", retryable=False)


class TimeoutError(LeveeError):
    """Request timeout (non-streaming calls only)."""

    def user_friendly_message(self) -> str:
        return (
            f"[TIMEOUT] Request timed out\n\n"
            f"Error: {self.message}\n\n"
            f"Suggestions:\n"
            f"  1. Check your network connection\n"
            f"  2. Try increasing the timeout (--timeout / LEVEE_TIMEOUT)"
        )


# ============================================================================
# HTTP API Errors
# ============================================================================


class APIError(LeveeError):
    """The HTTP API returned an error response."""

    def __init__(
        self,
        message: str,
        status_code: int,
        headers: Optional[Mapping[str, str]] = None,
        request_id: Optional[str] = None,
    ):
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.request_id = request_id
        super().__init__(message)

    def user_friendly_message(self) -> str:
        suffix = f" (request id: {self.request_id})" if self.request_id else ""
        return f"[API ERROR] (HTTP {self.status_code})\n\nError: {self.message}{suffix}"


class BadRequestError(APIError):
    """HTTP 400."""

    def __init__(self, message: str, headers=None, request_id: Optional[str] = None):
        super().__init__(message, 400, headers, request_id)


class AuthenticationError(APIError):
    """HTTP 401."""

    def __init__(self, message: str, headers=None, request_id: Optional[str] = None):
        super().__init__(message, 401, headers, request_id)


class PermissionDeniedError(APIError):
    """HTTP 403."""

    def __init__(self, message: str, headers=None, request_id: Optional[str] = None):
        super().__init__(message, 403, headers, request_id)


class NotFoundError(APIError):
    """HTTP 404."""

    def __init__(self, message: str, headers=None, request_id: Optional[str] = None):
        super().__init__(message, 404, headers, request_id)


class RateLimitError(APIError):
    """HTTP 429. ``retry_after`` is in seconds when the server sent one."""

    def __init__(
        self,
        message: str,
        headers=None,
        request_id: Optional[str] = None,
        retry_after: Optional[float] = None,
    ):
        self.retry_after = retry_after
        super().__init__(message, 429, headers, request_id)


class InternalServerError(APIError):
    """HTTP 5xx."""


class JSONParseError(LeveeError):
    """JSON parsing errors in response."""

    def __init__(self, message: str, response_text: str = ""):
        self.response_text = response_text
        super().__init__(message)

    def user_friendly_message(self) -> str:
        return (
            f"[JSON ERROR] Failed to parse JSON\n\n"
            f"Error: {self.message}\n\n"
            f"Response: {self.response_text[:200]}"
        )


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def create_api_error(
    message: str,
    status_code: int,
    headers: Optional[Mapping[str, str]] = None,
    request_id: Optional[str] = None,
) -> APIError:
    """Build the error class matching an HTTP status code."""
    headers = headers or {}
    if status_code == 400:
        return BadRequestError(message, headers, request_id)
    if status_code == 401:
        return AuthenticationError(message, headers, request_id)
    if status_code == 403:
        return PermissionDeniedError(message, headers, request_id)
    if status_code == 404:
        return NotFoundError(message, headers, request_id)
    if status_code == 429:
        retry_after = _parse_retry_after(headers.get("retry-after"))
        return RateLimitError(message, headers, request_id, retry_after=retry_after)
    if status_code >= 500:
        return InternalServerError(message, status_code, headers, request_id)
    return APIError(message, status_code, headers, request_id)
