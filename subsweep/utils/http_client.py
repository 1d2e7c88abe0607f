"""Async HTTP client for SUBSWEEP.

Provides :class:`AsyncHTTPClient`, a small aiohttp wrapper used by the
resolution workers to fetch the status code and page body of resolved hosts.
"""

from __future__ import annotations

import asyncio
import random
from types import TracebackType
from typing import Any, Dict, List, Optional, Type

import aiohttp
from aiohttp import ClientSession, ClientTimeout, TCPConnector

from subsweep.utils.logger import get_logger

logger = get_logger(__name__)

_DEFAULT_USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/121.0",
]

# Bodies beyond this size are truncated; titles live near the top.
_MAX_BODY_BYTES = 256 * 1024


class AsyncHTTPClient:
    """Async HTTP client with User-Agent rotation and a total request timeout.

    Failed requests are not retried.

    Usage::

        async with AsyncHTTPClient(timeout=9) as client:
            resp = await client.get("http://www.example.com")
            print(resp["status"], resp["body"][:200])
    """

    def __init__(
        self,
        timeout: float = 9.0,
        max_connections: int = 10,
        user_agents: Optional[List[str]] = None,
        verify_ssl: bool = False,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Initialise the client (does *not* open a session yet).

        Args:
            timeout: Total request timeout in seconds.
            max_connections: Maximum simultaneous TCP connections.
            user_agents: Pool of User-Agent strings to rotate.
            verify_ssl: Whether to verify TLS certificates after redirects.
            headers: Additional default headers sent with every request.
        """
        self._timeout = timeout
        self._max_connections = max_connections
        self._user_agents = user_agents or _DEFAULT_USER_AGENTS
        self._verify_ssl = verify_ssl
        self._default_headers: Dict[str, str] = headers or {}
        self._session: Optional[ClientSession] = None

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "AsyncHTTPClient":
        await self._create_session()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def _create_session(self) -> None:
        """Create the underlying :class:`aiohttp.ClientSession`."""
        connector = TCPConnector(
            limit=self._max_connections,
            ssl=None if self._verify_ssl else False,
        )
        self._session = ClientSession(
            connector=connector,
            timeout=ClientTimeout(total=self._timeout),
            headers=self._default_headers,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session and release connections."""
        if self._session and not self._session.closed:
            await self._session.close()

    # ------------------------------------------------------------------
    # Public HTTP methods
    # ------------------------------------------------------------------

    async def get(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Perform an HTTP GET request.

        Args:
            url: Target URL.
            **kwargs: Extra arguments forwarded to :meth:`aiohttp.ClientSession.get`.

        Returns:
            Response dict with ``status``, ``headers``, ``body``, ``url``.

        Raises:
            aiohttp.ClientError: On connection or protocol failure.
            asyncio.TimeoutError: When the request exceeds the timeout.
        """
        if self._session is None:
            await self._create_session()
        assert self._session is not None

        kwargs.setdefault("headers", {})
        kwargs["headers"]["User-Agent"] = random.choice(self._user_agents)

        async with self._session.get(url, **kwargs) as resp:
            raw = await resp.content.read(_MAX_BODY_BYTES)
            charset = resp.charset or "utf-8"
            try:
                body = raw.decode(charset, errors="replace")
            except LookupError:
                body = raw.decode("utf-8", errors="replace")
            logger.debug("GET %s -> %d (%d bytes)", url, resp.status, len(raw))
            return {
                "status": resp.status,
                "headers": dict(resp.headers),
                "body": body,
                "url": str(resp.url),
            }


HTTP_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)
