"""HTTP client for the UniVoucher REST API."""

import logging
from typing import Any

import httpx

from univoucher_mcp.framework.errors import RemoteParseFailedError, RemoteRequestFailedError

logger = logging.getLogger(__name__)

MAX_ERROR_BODY_CHARS = 2000


class UniVoucherAPIClient:
    """Async HTTP client with a bounded timeout and a retry on transient failures.

    Connection errors, timeouts and 5xx responses are retried up to
    ``max_retries`` times, unless the caller passes ``retry=False``, in which
    case only failures to connect are retried. 4xx responses are returned to
    the caller in the form of a RemoteRequestFailedError and never retried.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        max_retries: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: API base URL, e.g. https://api.univoucher.com/v1
            timeout_seconds: Per-request timeout in seconds
            max_retries: Retries on transient failures
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    def url_for(self, path: str) -> str:
        """Absolute URL for an API path, or ``path`` itself if already absolute."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        retry: bool = True,
    ) -> httpx.Response:
        """Send a request and return the successful response.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path relative to base_url, or an absolute URL
            params: Query parameters
            json_body: JSON request body
            retry: Retry timeouts and 5xx responses. When False only failures
                to connect are retried, so a request the server may have
                received is sent at most once.

        Returns:
            Response with a 2xx status

        Raises:
            RemoteRequestFailedError: On a non-2xx status, or when retries are exhausted
        """
        url = self.url_for(path)
        client = self._get_client()
        attempts = self.max_retries + 1

        for attempt in range(1, attempts + 1):
            try:
                response = await client.request(method, url, params=params, json=json_body)
            except httpx.TransportError as e:
                not_sent = isinstance(e, (httpx.ConnectError, httpx.ConnectTimeout))
                if attempt < attempts and (retry or not_sent):
                    logger.warning(
                        "%s %s failed (%s), retrying (%s/%s)",
                        method,
                        url,
                        type(e).__name__,
                        attempt,
                        self.max_retries,
                    )
                    continue
                msg = (
                    f"API request failed: {method} {url} unreachable "
                    f"after {attempt} attempt(s): {type(e).__name__}: {e}"
                )
                raise RemoteRequestFailedError(msg, url=url) from e

            if response.status_code >= 500 and retry and attempt < attempts:
                logger.warning(
                    "%s %s returned %s, retrying (%s/%s)",
                    method,
                    url,
                    response.status_code,
                    attempt,
                    self.max_retries,
                )
                continue

            if response.is_success:
                return response

            body = response.text[:MAX_ERROR_BODY_CHARS]
            msg = f"API request failed: {response.status_code} {response.reason_phrase}"
            raise RemoteRequestFailedError(
                msg,
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=body,
                url=url,
            )

        # range() above always returns or raises on the last attempt
        msg = f"API request failed: {method} {url}"
        raise RemoteRequestFailedError(msg, url=url)

    async def get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        response = await self.request("GET", path, params=params)
        return self._decode_json(response)

    async def post_json(self, path: str, body: dict[str, Any], retry: bool = True) -> Any:
        response = await self.request("POST", path, json_body=body, retry=retry)
        return self._decode_json(response)

    @staticmethod
    def _decode_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            msg = f"Response from {response.request.url} is not valid JSON"
            raise RemoteParseFailedError(msg, cause=e) from e

    async def get_text(self, path: str) -> str:
        response = await self.request("GET", path)
        return response.text

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "UniVoucherAPIClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
