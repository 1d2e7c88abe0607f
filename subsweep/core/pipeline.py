"""Enumeration pipeline orchestrator.

:class:`ScanPipeline` wires the stages together::

    CandidateGenerator -> tasks -> ResolveWorker x N -> results -> ResultSink

and runs them concurrently until they drain in cascade.  Stage completion is
communicated only through the :class:`~subsweep.core.status.StatusRegistry`.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Callable, Dict, List, Optional

from subsweep.core.channel import BoundedChannel
from subsweep.core.models import PipelineStats, ResolveResult
from subsweep.core.options import ScanOptions
from subsweep.core.status import GENERATOR, SINK, WORKER, StatusRegistry
from subsweep.engines.sink import ResultSink
from subsweep.engines.wildcard import WildcardGuard
from subsweep.engines.worker import HTTPClientFactory, ResolveWorker, ResolverFactory
from subsweep.generator.builders import CandidateGenerator, Strategy, build_strategy
from subsweep.utils.dns_resolver import AsyncDNSResolver
from subsweep.utils.http_client import AsyncHTTPClient
from subsweep.utils.logger import get_logger

logger = get_logger(__name__)


class ScanPipeline:
    """Runs one enumeration from validated :class:`ScanOptions`.

    Resolver and HTTP client factories default to the aiodns/aiohttp
    implementations and are called once per worker.

    Example::

        pipeline = ScanPipeline(options)
        await pipeline.check_wildcard()
        stats = await pipeline.run()
    """

    def __init__(
        self,
        options: ScanOptions,
        resolver_factory: Optional[ResolverFactory] = None,
        http_factory: Optional[HTTPClientFactory] = None,
        strategy: Optional[Strategy] = None,
    ) -> None:
        self.options = options
        self.config = options.config
        self._resolver_factory = resolver_factory or self._default_resolver
        self._http_factory = http_factory or self._default_http_client
        self._strategy = strategy
        self._event_handlers: List[Callable[[Dict[str, Any]], Any]] = []
        self.registry = StatusRegistry()
        self.tasks: Optional[BoundedChannel[str]] = None
        self.results: Optional[BoundedChannel[ResolveResult]] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def on_event(self, handler: Callable[[Dict[str, Any]], Any]) -> None:
        """Register a sync or async callable receiving event dicts."""
        self._event_handlers.append(handler)

    async def check_wildcard(self) -> None:
        """Run the wildcard guard once with a fresh resolver.

        Raises:
            WildcardDetected: If the target answers for made-up names.
        """
        async with self._resolver_factory() as resolver:
            guard = WildcardGuard(
                resolver,
                probe_label=self.config.wildcard.probe_label,
                random_length=self.config.wildcard.random_length,
            )
            await guard.check(self.options.target)

    async def run(self) -> PipelineStats:
        """Generate, resolve and persist until every stage has stopped.

        Returns:
            :class:`PipelineStats` for the run.

        Raises:
            DictionaryUnavailable: If the dictionary cannot be read; the other
                stages are cancelled first.
        """
        started = time.monotonic()
        pipeline_cfg = self.config.pipeline
        self.tasks = BoundedChannel(pipeline_cfg.task_queue_size, name="tasks")
        self.results = BoundedChannel(pipeline_cfg.result_queue_size, name="results")

        strategy = self._strategy or build_strategy(self.options)
        generator = CandidateGenerator(strategy, self.tasks, self.registry.register(GENERATOR))

        http_factory = self._http_factory if self.options.fetch_title else None
        workers = [
            ResolveWorker(
                index=i,
                target=self.options.target,
                tasks=self.tasks,
                results=self.results,
                registry=self.registry,
                handle=self.registry.register(WORKER, i),
                resolver_factory=self._resolver_factory,
                http_factory=http_factory,
                poll_interval=pipeline_cfg.worker_poll_interval,
                on_result=self._result_found,
            )
            for i in range(self.options.task_count)
        ]
        sink = ResultSink(
            self.options.output_path,
            self.results,
            self.registry,
            self.registry.register(SINK),
            poll_interval=pipeline_cfg.sink_poll_interval,
        )

        await self._emit({
            "event": "pipeline_started",
            "target": self.options.target,
            "strategy": strategy.describe(),
            "workers": len(workers),
        })
        logger.info(
            "Enumerating %s with %d workers (%s)",
            self.options.target,
            len(workers),
            strategy.describe(),
        )

        stages = [
            asyncio.create_task(generator.run(), name=GENERATOR),
            *(
                asyncio.create_task(worker.run(), name=worker.handle.ident)
                for worker in workers
            ),
            asyncio.create_task(sink.run(), name=SINK),
        ]
        await self._supervise(stages)

        stats = PipelineStats(
            candidates=generator.produced,
            dropped=generator.dropped,
            resolved=sum(worker.found for worker in workers),
            written=sink.written,
            write_failures=sink.failed,
            duration=time.monotonic() - started,
        )
        await self._emit({"event": "pipeline_finished", "stats": stats.to_dict()})
        logger.info(
            "Enumeration of %s finished: %d candidates, %d resolved, %d written in %.1fs",
            self.options.target,
            stats.candidates,
            stats.resolved,
            stats.written,
            stats.duration,
        )
        return stats

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _supervise(stages: List["asyncio.Task[None]"]) -> None:
        """Wait for all stages; on the first failure cancel the rest and re-raise."""
        done, pending = await asyncio.wait(stages, return_when=asyncio.FIRST_EXCEPTION)
        failed = [task for task in done if not task.cancelled() and task.exception()]
        if not failed:
            return
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        exc = failed[0].exception()
        logger.error("Stage %s failed: %s", failed[0].get_name(), exc)
        assert exc is not None
        raise exc

    async def _result_found(self, result: ResolveResult) -> None:
        await self._emit({"event": "result_found", "result": result})

    async def _emit(self, event: Dict[str, Any]) -> None:
        for handler in self._event_handlers:
            try:
                outcome = handler(event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as exc:  # noqa: BLE001
                logger.debug("Event handler error: %s", exc)

    def _default_resolver(self) -> AsyncDNSResolver:
        return AsyncDNSResolver(
            nameservers=self.options.nameservers,
            timeout=self.config.dns.timeout,
        )

    def _default_http_client(self) -> AsyncHTTPClient:
        return AsyncHTTPClient(
            timeout=self.config.http.timeout,
            user_agents=self.config.http.user_agents,
            verify_ssl=self.config.http.verify_ssl,
        )
