"""Resolution workers.

Each :class:`ResolveWorker` pulls candidate labels from the task channel,
resolves ``<label>.<target>``, optionally probes the host over HTTP, and sends
a :class:`~subsweep.core.models.ResolveResult` for every hit.  Workers share
nothing but the two channels and the status registry.
"""

from __future__ import annotations

import asyncio
import html
import re
from contextlib import AsyncExitStack
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from subsweep.core.channel import BoundedChannel
from subsweep.core.errors import ChannelClosed, ChannelEmpty
from subsweep.core.models import ResolveResult
from subsweep.core.status import GENERATOR, StageHandle, StatusRegistry
from subsweep.utils.http_client import HTTP_ERRORS
from subsweep.utils.logger import get_logger

logger = get_logger(__name__)

_TITLE_RE = re.compile(r"<title[^>]*>(.+?)</title>", re.IGNORECASE | re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")

ResolverFactory = Callable[[], Any]
HTTPClientFactory = Callable[[], Any]
ResultCallback = Callable[[ResolveResult], Awaitable[None]]


def extract_title(body: str) -> Optional[str]:
    """Return the first ``<title>`` text in *body*, collapsed to one line."""
    match = _TITLE_RE.search(body)
    if not match:
        return None
    title = _WHITESPACE_RE.sub(" ", html.unescape(match.group(1))).strip()
    return title or None


class ResolveWorker:
    """One member of the resolution worker pool.

    Example::

        worker = ResolveWorker(
            index=0,
            target="example.com",
            tasks=tasks,
            results=results,
            registry=registry,
            handle=registry.register(WORKER, 0),
            resolver_factory=lambda: AsyncDNSResolver(["8.8.8.8"]),
        )
        await worker.run()
    """

    def __init__(
        self,
        index: int,
        target: str,
        tasks: BoundedChannel[str],
        results: BoundedChannel[ResolveResult],
        registry: StatusRegistry,
        handle: StageHandle,
        resolver_factory: ResolverFactory,
        http_factory: Optional[HTTPClientFactory] = None,
        poll_interval: float = 0.2,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        """Initialise the worker.

        Args:
            index: Position in the pool, used for logging.
            target: Domain the candidates are appended to.
            tasks: Channel of candidate labels.
            results: Channel receiving :class:`ResolveResult` objects.
            registry: Read access to the generator's state.
            handle: Write access to this worker's own state.
            resolver_factory: Returns an async context manager yielding an
                object with ``resolve`` and ``resolve_cname`` coroutines.
            http_factory: Returns an async context manager yielding an object
                with a ``get`` coroutine; ``None`` disables HTTP probing.
            poll_interval: Seconds to sleep when the task channel is empty.
            on_result: Optional coroutine called for each result sent.
        """
        self.index = index
        self.target = target
        self.tasks = tasks
        self.results = results
        self.registry = registry
        self.handle = handle
        self._resolver_factory = resolver_factory
        self._http_factory = http_factory
        self._poll_interval = poll_interval
        self._on_result = on_result
        self.processed = 0
        self.found = 0

    async def run(self) -> None:
        """Process candidates until the generator is done and the channel is empty."""
        self.handle.mark_running()
        try:
            async with AsyncExitStack() as stack:
                resolver = await stack.enter_async_context(self._resolver_factory())
                http = None
                if self._http_factory is not None:
                    http = await stack.enter_async_context(self._http_factory())
                await self._loop(resolver, http)
        finally:
            self.handle.mark_stopped()
        logger.debug(
            "Worker %d finished: %d processed, %d found",
            self.index,
            self.processed,
            self.found,
        )

    async def _loop(self, resolver: Any, http: Any) -> None:
        while True:
            try:
                candidate = self.tasks.try_recv()
            except ChannelEmpty:
                if self.registry.is_stopped(GENERATOR):
                    return
                await asyncio.sleep(self._poll_interval)
                continue

            self.processed += 1
            result = await self.process(candidate, resolver, http)
            if result is None:
                continue

            logger.info("Found: %s %s", result.domain, list(result.addresses or result.cnames))
            try:
                await self.results.send(result)
            except ChannelClosed as exc:
                logger.warning("Dropping result for %s: %s", result.domain, exc)
                continue
            self.found += 1
            if self._on_result is not None:
                await self._on_result(result)

    async def process(self, candidate: str, resolver: Any, http: Any = None) -> Optional[ResolveResult]:
        """Resolve one candidate and build its result.

        Args:
            candidate: Label to prepend to the target.
            resolver: DNS capability.
            http: HTTP capability, or ``None`` to skip probing.

        Returns:
            A :class:`ResolveResult`, or ``None`` when nothing resolved.
        """
        domain = f"{candidate}.{self.target}"
        cnames, addresses = await self._resolve(domain, resolver)

        status: Optional[int] = None
        title: Optional[str] = None
        if addresses and http is not None:
            status, title = await self._probe(domain, http)

        if not cnames and not addresses:
            return None
        return ResolveResult(
            domain=domain,
            title=title,
            http_code=status,
            addresses=tuple(addresses),
            cnames=tuple(cnames),
        )

    async def _resolve(self, domain: str, resolver: Any) -> Tuple[List[str], List[str]]:
        cnames: List[str] = []
        addresses: List[str] = []
        try:
            cnames = list(await resolver.resolve_cname(domain))
        except Exception as exc:  # noqa: BLE001
            logger.debug("CNAME lookup for %s failed: %s", domain, exc)
        try:
            addresses = list(await resolver.resolve(domain))
        except Exception as exc:  # noqa: BLE001
            logger.debug("Address lookup for %s failed: %s", domain, exc)
        return cnames, addresses

    async def _probe(self, domain: str, http: Any) -> Tuple[Optional[int], Optional[str]]:
        url = f"http://{domain}"
        try:
            response = await http.get(url)
        except HTTP_ERRORS as exc:
            logger.debug("Fetching HTTP status and title for %s failed: %r", url, exc)
            return None, None
        except Exception as exc:  # noqa: BLE001
            logger.debug("Unexpected HTTP error for %s: %r", url, exc)
            return None, None
        return response.get("status"), extract_title(response.get("body") or "")
