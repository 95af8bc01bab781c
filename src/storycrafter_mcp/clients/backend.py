"""
HTTP client for the StoryCrafter generation backend.

Failures are classified into three distinct errors so callers can tell a
rejection from an outage:

- RemoteError: the backend answered with a non-2xx status or ``success: false``
- BackendUnavailableError: timeout, connection failure or no response
- RequestError: any other transport failure or an unreadable response

No retries are attempted; a failed call is reported immediately.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from storycrafter_mcp.errors import BackendUnavailableError, RemoteError, RequestError

logger = logging.getLogger(__name__)


def extract_error_detail(response: httpx.Response) -> str:
    """Pull the most specific error message out of a backend error response."""
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"

    if isinstance(data, dict):
        for key in ("detail", "error", "message"):
            detail = data.get(key)
            if detail:
                return detail if isinstance(detail, str) else json.dumps(detail)
    return response.reason_phrase or f"HTTP {response.status_code}"


class BackendClient:
    """Posts transformed requests to the StoryCrafter backend."""

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize backend client.

        Args:
            base_url: Backend base URL (e.g. https://storycrafter-service.vercel.app)
            transport: Optional httpx transport, used to stub the backend in tests
        """
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def call(
        self,
        path: str,
        body: Dict[str, Any],
        timeout: float,
        failure_message: str = "Backend operation failed",
    ) -> Dict[str, Any]:
        """
        POST ``body`` to ``path`` and return the decoded JSON response.

        Args:
            path: Endpoint path (e.g. "/generate-epics")
            body: JSON request body
            timeout: Request timeout in seconds
            failure_message: Message used when the backend reports
                ``success: false`` without an error text

        Returns:
            Backend response body

        Raises:
            RemoteError: Backend rejected the request
            BackendUnavailableError: Backend unreachable or timed out
            RequestError: Any other transport failure
        """
        url = f"{self.base_url}{path}"
        logger.info(f"POST {url} (timeout {timeout:.0f}s)")

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(url, json=body)
        except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as e:
            logger.warning(f"Backend unreachable at {url}: {e!r}")
            raise BackendUnavailableError(self.base_url) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Backend request to {url} failed: {e!r}")
            raise RequestError(str(e) or type(e).__name__) from e

        if response.is_error:
            detail = extract_error_detail(response)
            logger.warning(f"Backend returned {response.status_code} for {path}: {detail}")
            raise RemoteError(detail, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise RequestError(f"invalid JSON response from {url}") from e

        if not isinstance(data, dict):
            raise RequestError(f"unexpected response shape from {url}")

        if not data.get("success"):
            raise RemoteError(data.get("error") or failure_message, status_code=response.status_code)

        return data
