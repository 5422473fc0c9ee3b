"""
Shared HTTP Client Manager with Connection Pooling.

Provides the pooled httpx.AsyncClient the journal client uses to reach the
reflection endpoint. One client is opened per process (or per CLI command)
and closed on shutdown instead of paying connection setup on every entry.

Usage:
    from app.services.http_client import HTTPClientManager

    manager = HTTPClientManager(default_timeout=30.0)
    await manager.startup()
    client = await manager.get_client()
    response = await client.post(url, json={"prompt": "..."})
    await manager.shutdown()
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger("Journal.HTTP.Client")


class HTTPClientManager:
    """
    Manages a shared httpx.AsyncClient with connection pooling.

    Configuration:
    - max_connections: Maximum total connections (default: 10)
    - max_keepalive_connections: Max idle connections to keep (default: 5)
    - default_timeout: Request timeout in seconds (default: 30.0)
    - transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        max_connections: int = 10,
        max_keepalive_connections: int = 5,
        default_timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._max_connections = max_connections
        self._max_keepalive_connections = max_keepalive_connections
        self._default_timeout = default_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._initialized = False

    @property
    def limits(self) -> httpx.Limits:
        """Get the connection limits configuration."""
        return httpx.Limits(
            max_connections=self._max_connections,
            max_keepalive_connections=self._max_keepalive_connections,
        )

    async def startup(self) -> None:
        """Create the pooled AsyncClient."""
        if self._initialized:
            logger.warning("HTTP client manager already initialized")
            return

        client_kwargs = {
            "limits": self.limits,
            "timeout": httpx.Timeout(self._default_timeout),
            "follow_redirects": True,
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport

        self._client = httpx.AsyncClient(**client_kwargs)
        self._initialized = True
        logger.debug(
            f"HTTP client manager initialized "
            f"(max_connections={self._max_connections}, "
            f"timeout={self._default_timeout}s)"
        )

    async def shutdown(self) -> None:
        """Close the shared client and release all connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._initialized = False
            logger.debug("HTTP client manager shut down")

    async def get_client(self) -> httpx.AsyncClient:
        """
        Get the shared HTTP client.

        Initializes it on first use if startup() was not called.
        """
        if self._client is None or not self._initialized:
            await self.startup()
        return self._client
