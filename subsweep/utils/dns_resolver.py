"""Async DNS resolver for SUBSWEEP.

Provides :class:`AsyncDNSResolver`, an aiodns-based resolver exposing the two
lookups the pipeline needs: addresses (A + AAAA) and the CNAME chain.  Every
worker owns its own instance, so nothing here is shared between tasks.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Sequence

import aiodns

from subsweep.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_NAMESERVERS = ["8.8.8.8", "8.8.4.4"]

# Maximum CNAME hops followed by resolve_cname
_MAX_CNAME_HOPS = 8


class AsyncDNSResolver:
    """Async DNS resolver bound to a fixed set of nameservers.

    Lookups never raise for DNS-level failures (NXDOMAIN, no data, timeout);
    they log at debug level and return an empty list.  Failed queries are not
    retried.

    Example::

        async with AsyncDNSResolver(nameservers=["8.8.8.8"]) as dns:
            addresses = await dns.resolve("www.example.com")
            chain = await dns.resolve_cname("www.example.com")
    """

    def __init__(
        self,
        nameservers: Optional[Sequence[str]] = None,
        timeout: float = 5.0,
    ) -> None:
        """Initialise the resolver (the aiodns channel is created lazily).

        Args:
            nameservers: DNS server IPs (defaults to Google public DNS).
            timeout: Per-query timeout in seconds.
        """
        self._nameservers = list(nameservers) if nameservers else list(DEFAULT_NAMESERVERS)
        self._timeout = timeout
        self._resolver: Optional[aiodns.DNSResolver] = None

    async def __aenter__(self) -> "AsyncDNSResolver":
        self._init()
        return self

    async def __aexit__(self, *_: Any) -> None:
        if self._resolver is not None:
            self._resolver.cancel()
            self._resolver = None

    def _init(self) -> None:
        """Create the underlying aiodns resolver."""
        self._resolver = aiodns.DNSResolver(
            nameservers=self._nameservers,
            timeout=self._timeout,
            tries=1,
        )

    @property
    def nameservers(self) -> List[str]:
        return list(self._nameservers)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, domain: str) -> List[str]:
        """Return the IPv4 and IPv6 addresses of *domain*.

        Args:
            domain: Fully qualified name to look up.

        Returns:
            A-record addresses followed by AAAA-record addresses.  A lookup
            that fails for any reason contributes nothing.
        """
        answers = await asyncio.gather(
            self.lookup(domain, "A"),
            self.lookup(domain, "AAAA"),
            return_exceptions=True,
        )
        addresses: List[str] = []
        for record_type, answer in zip(("A", "AAAA"), answers):
            if isinstance(answer, BaseException):
                logger.debug("DNS %s lookup for %s raised: %r", record_type, domain, answer)
                continue
            addresses.extend(answer)
        return addresses

    async def resolve_cname(self, domain: str) -> List[str]:
        """Return the CNAME chain starting at *domain*.

        Args:
            domain: Fully qualified name to look up.

        Returns:
            Canonical names in chain order (empty when *domain* has no CNAME).
        """
        chain: List[str] = []
        current = domain
        for _ in range(_MAX_CNAME_HOPS):
            targets = await self.lookup(current, "CNAME")
            if not targets:
                break
            current = targets[0]
            if current in chain:
                break
            chain.append(current)
        return chain

    async def lookup(self, domain: str, record_type: str) -> List[str]:
        """Query *domain* for one *record_type*.

        Args:
            domain: The domain name to query.
            record_type: ``"A"``, ``"AAAA"`` or ``"CNAME"``.

        Returns:
            List of string representations of the records.
        """
        if self._resolver is None:
            self._init()
        assert self._resolver is not None

        record_type = record_type.upper()
        try:
            result = await self._resolver.query(domain, record_type)
        except aiodns.error.DNSError as exc:
            logger.debug("DNS %s query for %s failed: %s", record_type, domain, exc)
            return []
        return self._format_records(result, record_type)

    @staticmethod
    def _format_records(result: Any, record_type: str) -> List[str]:
        """Convert aiodns result objects to plain strings.

        Args:
            result: Raw aiodns result (list or single object).
            record_type: DNS record type string.

        Returns:
            List of string representations.
        """
        out: List[str] = []
        items = result if isinstance(result, list) else [result]
        for item in items:
            if record_type in ("A", "AAAA"):
                out.append(item.host)
            elif record_type == "CNAME":
                out.append(item.cname.rstrip("."))
            else:
                out.append(str(item))
        return out
