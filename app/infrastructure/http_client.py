"""HTTP Client for shared connection management.

This module provides a managed httpx.AsyncClient for reusing
HTTP connections across the application, plus the retry wrapper used
for upstream generation calls.
"""

import asyncio
from contextlib import AbstractAsyncContextManager
from typing import Any

import httpx

from app.core.logging import get_logger

# Retriable HTTP status codes
RETRIABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class HTTPClient:
    """Managed HTTP client with connection reuse.

    Designed for DI injection. Create once at application startup,
    inject where needed, close at shutdown.

    Example:
        # In container setup
        http_client = HTTPClient()

        # In service
        response = await http_client.post_with_retry(url, json=payload)

        # At shutdown
        await http_client.close()
    """

    def __init__(
        self,
        timeout: float | None = 30.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
        connect_timeout: float | None = None,
        keepalive_expiry: float | None = 5.0,
        logger: Any | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds (None disables read/write timeouts)
            max_connections: Maximum number of connections
            max_keepalive_connections: Maximum keepalive connections
            connect_timeout: Separate connect timeout (defaults to timeout)
            keepalive_expiry: Idle keep-alive expiry in seconds
            logger: Logger instance (defaults to the module logger)
        """
        self._logger = logger or get_logger(__name__)
        if connect_timeout is None:
            client_timeout = httpx.Timeout(timeout)
        else:
            client_timeout = httpx.Timeout(timeout, connect=connect_timeout)

        self._client = httpx.AsyncClient(
            timeout=client_timeout,
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive_connections,
                keepalive_expiry=keepalive_expiry,
            ),
            follow_redirects=True,
        )
        self._logger.info(
            "HTTP client initialized",
            timeout=timeout,
            connect_timeout=connect_timeout,
            max_connections=max_connections,
            max_keepalive=max_keepalive_connections,
        )

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """Send GET request."""
        return await self._client.get(url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        """Send POST request."""
        return await self._client.post(url, **kwargs)

    async def post_with_retry(
        self,
        url: str,
        *,
        max_retries: int = 2,
        backoff: float = 1.0,
        **kwargs,
    ) -> httpx.Response:
        """Send POST request, retrying transport errors and retriable statuses.

        The last response is returned even when its status is not 2xx, so
        callers can surface the upstream body.

        Args:
            url: Request URL
            max_retries: Retries after the first attempt
            backoff: Base delay; attempt n waits backoff * 2**(n-1) seconds
            **kwargs: Passed to httpx (json, headers, ...)

        Returns:
            Final HTTP response

        Raises:
            httpx.RequestError: If the last attempt fails at the transport level
        """
        retry_count = 0
        while True:
            try:
                response = await self._client.post(url, **kwargs)
            except httpx.RequestError as e:
                if retry_count >= max_retries:
                    raise
                retry_count += 1
                wait_time = backoff * 2 ** (retry_count - 1)
                self._logger.warning(
                    "Retrying request on error",
                    url=url,
                    error=str(e),
                    retry=retry_count,
                    wait_seconds=wait_time,
                )
                await asyncio.sleep(wait_time)
                continue

            if response.status_code in RETRIABLE_STATUS_CODES and retry_count < max_retries:
                retry_count += 1
                wait_time = backoff * 2 ** (retry_count - 1)
                self._logger.warning(
                    "Retrying request",
                    url=url,
                    status=response.status_code,
                    retry=retry_count,
                    wait_seconds=wait_time,
                )
                await response.aclose()
                await asyncio.sleep(wait_time)
                continue

            return response

    def stream(
        self, method: str, url: str, **kwargs
    ) -> AbstractAsyncContextManager[httpx.Response]:
        """Open a streamed request; the connection is released on exit."""
        return self._client.stream(method, url, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()
        self._logger.info("HTTP client closed")


def create_streaming_client(
    connect_timeout: float = 120.0,
    max_connections: int = 30,
) -> HTTPClient:
    """Create a client for long-running streamed uploads.

    Read and write timeouts are disabled so a slow upstream can keep the
    response body open for as long as it needs.

    Args:
        connect_timeout: Connection timeout in seconds
        max_connections: Connection pool size

    Returns:
        Dedicated HTTPClient
    """
    return HTTPClient(
        timeout=None,
        connect_timeout=connect_timeout,
        max_connections=max_connections,
        max_keepalive_connections=max_connections,
        keepalive_expiry=60.0,
    )


__all__ = ["HTTPClient", "RETRIABLE_STATUS_CODES", "create_streaming_client"]
