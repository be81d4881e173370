"""
HTTP client for the Levee REST API.

Wraps httpx.AsyncClient with API key auth, field-name normalization and
status-code driven error classification. No retries are performed.
"""

import logging
import re
from typing import Any, Dict, Optional

import httpx

from levee.core.config import get_config
from levee.errors import ConnectionError, JSONParseError, TimeoutError, create_api_error
from levee.resources.billing import Billing
from levee.resources.contacts import Contacts
from levee.resources.content import Content
from levee.resources.customers import Customers
from levee.resources.emails import Emails
from levee.resources.lists import Lists
from levee.resources.llm import LLM
from levee.resources.orders import Orders
from levee.resources.sequences import Sequences
from levee.resources.site import Site
from levee.resources.stats import Stats
from levee.resources.tracking import Tracking
from levee.resources.webhooks import Webhooks

logger = logging.getLogger(__name__)

_SENSITIVE_HEADERS = {"authorization", "x-api-key"}
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


# ============================================================================
# Field Name Conversion
# ============================================================================


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def convert_keys(obj: Any, convert) -> Any:
    """Recursively rename dict keys with ``convert``; values are untouched."""
    if isinstance(obj, dict):
        return {convert(k) if isinstance(k, str) else k: convert_keys(v, convert) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [convert_keys(item, convert) for item in obj]
    return obj


def to_snake_case_keys(obj: Any) -> Any:
    return convert_keys(obj, to_snake_case)


# ============================================================================
# HTTP Client
# ============================================================================


class Levee:
    """
    Main Levee SDK client.

    Example:
        async with Levee("lv_your_api_key") as levee:
            contact = await levee.contacts.create({"email": "user@example.com", "name": "Jane"})
            await levee.tracking.track(event="signup", email="user@example.com")

    Args:
        api_key: Levee API key (falls back to LEVEE_API_KEY)
        base_url: API base URL (falls back to LEVEE_BASE_URL)
        timeout: Request timeout in seconds (falls back to LEVEE_TIMEOUT)
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = get_config(api_key=api_key, base_url=base_url, timeout=timeout)
        if not config.api_key:
            raise ValueError("API key is required")

        self.api_key = config.api_key
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={
                "X-API-Key": self.api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport,
        )

        self.contacts = Contacts(self)
        self.emails = Emails(self)
        self.lists = Lists(self)
        self.tracking = Tracking(self)
        self.llm = LLM(self)
        self.sequences = Sequences(self)
        self.billing = Billing(self)
        self.customers = Customers(self)
        self.webhooks = Webhooks(self)
        self.stats = Stats(self)
        self.content = Content(self)
        self.site = Site(self)
        self.orders = Orders(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying httpx client."""
        if self._client:
            await self._client.aclose()

    def _log_request(self, method: str, path: str) -> None:
        """Log request details (without sensitive headers)."""
        headers = self._client.headers
        safe_headers = {k: ("***" if k.lower() in _SENSITIVE_HEADERS else v) for k, v in headers.items()}
        logger.debug(f"{method} {self.base_url}{path} | headers: {safe_headers}")

    async def _send(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        self._log_request(method, path)
        body = to_snake_case_keys(json) if json is not None else None
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._client.request(method, path, json=body, params=params or None)
        except httpx.TimeoutException as e:
            raise TimeoutError(f"Request timed out after {self.timeout}s") from e
        except (httpx.ConnectError, httpx.NetworkError) as e:
            raise ConnectionError(str(e)) from e
        except httpx.HTTPError as e:
            raise ConnectionError(f"HTTP error: {str(e)}") from e

        if response.status_code >= 400:
            raise self._error_from_response(response)
        return response

    def _error_from_response(self, response: httpx.Response):
        message = f"API request failed with status {response.status_code}"
        text = response.text
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("message") or body.get("error") or message
        except ValueError:
            if text:
                message = text[:200]

        request_id = response.headers.get("x-request-id")
        logger.debug(f"API error {response.status_code} (request_id={request_id}): {message}")
        return create_api_error(message, response.status_code, response.headers, request_id)

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make a request and return the decoded JSON body (snake_case keys).

        Raises:
            ConnectionError: Connection failure
            TimeoutError: Request timeout
            APIError: Non-2xx HTTP status (subclass chosen by status code)
            JSONParseError: JSON parsing failure
        """
        response = await self._send(method, path, json=json, params=params)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return to_snake_case_keys(response.json())
        except ValueError as e:
            raise JSONParseError(
                f"Failed to parse JSON response: {str(e)}",
                response_text=response.text,
            ) from e

    async def request_void(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Make a request whose response body is ignored."""
        await self._send(method, path, json=json, params=params)
