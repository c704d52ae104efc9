"""Async REST API client built on httpx.

All outbound HTTP goes through APIClient so auth headers, timeouts and
error mapping are handled in one place. Request methods never raise for
HTTP or transport failures; they return ``(success, data_or_message)``.

Usage:
    async with APIClient(base_url="https://example.atlassian.net/rest/api/3",
                         basic_auth=("me@example.com", "token")) as client:
        success, data = await client.get("issuetype")
        if not success:
            return tool_error("Error fetching issue types", error=data)
"""

import base64
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# Max characters of an error body echoed back to the caller
ERROR_BODY_LIMIT = 500


@dataclass
class APIClient:
    """Reusable async HTTP client with auth and response mapping.

    Attributes:
        base_url: Prefix joined with every request path
        basic_auth: ``(username, password)`` for ``Authorization: Basic``
        timeout: Request timeout in seconds
        follow_redirects: Whether httpx follows redirects
        verify_ssl: Whether TLS certificates are verified
        extra_headers: Headers added to every request
        auth_error_msg: Message returned on HTTP 401
        not_found_msg: Message returned on HTTP 404
    """

    base_url: str = ""
    basic_auth: tuple[str, str] | None = None
    timeout: float = 30.0
    follow_redirects: bool = True
    verify_ssl: bool = True
    extra_headers: dict[str, str] = field(default_factory=dict)
    auth_error_msg: str = "Authentication failed (HTTP 401)."
    not_found_msg: str = "Resource not found (HTTP 404)."
    _client: httpx.AsyncClient | None = field(default=None, repr=False)

    def _build_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url.rstrip("/") + path

    def _build_headers(self, headers: dict[str, str] | None = None) -> dict[str, str]:
        result = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.basic_auth:
            username, password = self.basic_auth
            encoded = base64.b64encode(f"{username}:{password}".encode()).decode()
            result["Authorization"] = f"Basic {encoded}"
        result.update(self.extra_headers)
        if headers:
            result.update(headers)
        return result

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=self.follow_redirects,
                verify=self.verify_ssl,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "APIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _format_http_error(self, response: httpx.Response) -> str:
        """Error message for a non-2xx response other than 401/404."""
        return f"HTTP {response.status_code}: {response.text[:ERROR_BODY_LIMIT]}"

    def _handle_response(self, response: httpx.Response) -> tuple[bool, Any]:
        """Map an HTTP response to ``(success, data_or_message)``."""
        if response.status_code == 401:
            return False, self.auth_error_msg
        if response.status_code == 404:
            return False, self.not_found_msg
        if response.status_code >= 400:
            return False, self._format_http_error(response)

        if not response.content:
            return True, None

        try:
            return True, response.json()
        except ValueError:
            return True, response.text

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> tuple[bool, Any]:
        """Send a request and map the outcome.

        Args:
            method: HTTP method
            path: Path relative to base_url
            params: Query parameters
            json: JSON request body
            headers: Extra headers for this request only

        Returns:
            ``(True, parsed_body)`` on 2xx, ``(False, message)`` otherwise
        """
        url = self._build_url(path)
        client = await self._get_client()
        logger.debug(f"{method} {url}")

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._build_headers(headers),
            )
        except httpx.TimeoutException:
            return False, f"Request timed out after {self.timeout}s"
        except httpx.ConnectError as e:
            return False, f"Connection error: {e}"
        except httpx.HTTPStatusError as e:
            return False, f"HTTP error: {e.response.status_code}"
        except httpx.RequestError as e:
            return False, f"Request error: {e}"

        return self._handle_response(response)

    async def get(self, path: str, **kwargs: Any) -> tuple[bool, Any]:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> tuple[bool, Any]:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> tuple[bool, Any]:
        return await self.request("PUT", path, **kwargs)
