"""HTTP transport for fetching feed documents."""

import logging
import os
from typing import Protocol
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0
USER_AGENT = "feedmenu/0.1"


class TransportError(Exception):
    """Raised when a feed document cannot be fetched."""


class Transport(Protocol):
    async def fetch(self, url: str) -> bytes: ...


class HttpTransport:
    """Fetches feed documents over HTTP(S) with httpx.

    Cancelling the awaiting task cancels the request.
    """

    def __init__(
        self,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if timeout is None:
            timeout = float(
                os.environ.get("RSS_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT)
            )
        self.timeout = timeout
        self._client = client

    async def fetch(self, url: str) -> bytes:
        """Fetch the raw bytes of the document at ``url``.

        Raises:
            TransportError: If the URL is invalid or the request fails.
        """
        validate_url(url)

        if self._client is not None:
            return await self._get(self._client, url)
        async with httpx.AsyncClient(
            timeout=self.timeout, headers={"User-Agent": USER_AGENT}
        ) as client:
            return await self._get(client, url)

    async def _get(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            raise TransportError(f"Could not reach URL: {e}") from e

        if response.status_code in (401, 403):
            raise TransportError(
                "Feed requires authentication. Ensure the URL is publicly accessible."
            )
        if response.status_code >= 400:
            raise TransportError(f"Could not reach URL: HTTP {response.status_code}")

        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.content


def validate_url(url: str) -> None:
    """Validate that the URL has a valid format."""
    try:
        result = urlparse(url)
    except ValueError:
        raise TransportError("Invalid URL format")
    if not result.scheme or not result.netloc:
        raise TransportError("Invalid URL format")
    if result.scheme not in ("http", "https"):
        raise TransportError("Invalid URL format: only http and https are supported")
