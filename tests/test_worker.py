"""Tests for subsweep.engines.worker."""

from __future__ import annotations

import asyncio

import aiohttp
import pytest

from subsweep.core.channel import BoundedChannel
from subsweep.core.errors import ChannelEmpty
from subsweep.core.status import GENERATOR, WORKER, EngineState, StatusRegistry
from subsweep.engines.worker import ResolveWorker, extract_title
from tests.conftest import StubHTTPClient, StubResolver


def _make_worker(resolver, http=None, registry=None, tasks=None, results=None, on_result=None):
    registry = registry or StatusRegistry()
    return ResolveWorker(
        index=0,
        target="example.com",
        tasks=tasks or BoundedChannel(10),
        results=results or BoundedChannel(10),
        registry=registry,
        handle=registry.register(WORKER, 0),
        resolver_factory=lambda: resolver,
        http_factory=(lambda: http) if http is not None else None,
        poll_interval=0.01,
        on_result=on_result,
    )


# ---------------------------------------------------------------------------
# extract_title
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "body, expected",
    [
        ("<html><head><title>Home</title></head></html>", "Home"),
        ("<TITLE lang='en'>Upper</TITLE>", "Upper"),
        ("<title>\n  Multi\n  line\n</title>", "Multi line"),
        ("<title>Tom &amp; Jerry</title>", "Tom & Jerry"),
        ("<title>first</title><title>second</title>", "first"),
        ("<html>no title here</html>", None),
        ("<title>   </title>", None),
        ("", None),
    ],
)
def test_extract_title(body, expected):
    assert extract_title(body) == expected


# ---------------------------------------------------------------------------
# process
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_process_hit():
    resolver = StubResolver(addresses={"www.example.com": ["93.184.216.34"]})
    worker = _make_worker(resolver)
    result = await worker.process("www", resolver)
    assert result is not None
    assert result.domain == "www.example.com"
    assert result.addresses == ("93.184.216.34",)
    assert result.cnames == ()
    assert result.http_code is None
    assert result.title is None


@pytest.mark.asyncio
async def test_process_miss_returns_none():
    resolver = StubResolver()
    worker = _make_worker(resolver)
    assert await worker.process("nothing", resolver) is None


@pytest.mark.asyncio
async def test_process_cname_only_is_a_hit():
    resolver = StubResolver(cnames={"cdn.example.com": ["edge.cdn.net"]})
    http = StubHTTPClient()
    worker = _make_worker(resolver, http)
    result = await worker.process("cdn", resolver, http)
    assert result is not None
    assert result.cnames == ("edge.cdn.net",)
    assert result.addresses == ()
    # No address, no HTTP probe.
    assert http.requested == []


@pytest.mark.asyncio
async def test_process_fetches_status_and_title():
    resolver = StubResolver(addresses={"www.example.com": ["1.2.3.4"]})
    http = StubHTTPClient(
        pages={"http://www.example.com": {"status": 200, "body": "<title>Welcome</title>"}}
    )
    worker = _make_worker(resolver, http)
    result = await worker.process("www", resolver, http)
    assert result.http_code == 200
    assert result.title == "Welcome"
    assert http.requested == ["http://www.example.com"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError(), RuntimeError("boom")],
)
async def test_process_http_failure_keeps_result(error):
    resolver = StubResolver(addresses={"www.example.com": ["1.2.3.4"]})
    http = StubHTTPClient(error=error)
    worker = _make_worker(resolver, http)
    result = await worker.process("www", resolver, http)
    assert result is not None
    assert result.http_code is None
    assert result.title is None


@pytest.mark.asyncio
async def test_process_dns_failure_is_isolated():
    resolver = StubResolver(
        addresses={"ok.example.com": ["1.2.3.4"]},
        fail={"bad.example.com"},
    )
    worker = _make_worker(resolver)
    assert await worker.process("bad", resolver) is None
    assert (await worker.process("ok", resolver)).domain == "ok.example.com"


# ---------------------------------------------------------------------------
# run loop
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_run_drains_and_stops_after_generator():
    registry = StatusRegistry()
    generator = registry.register(GENERATOR)
    generator.mark_running()
    tasks: BoundedChannel[str] = BoundedChannel(10)
    results = BoundedChannel(10)
    resolver = StubResolver(addresses={"a.example.com": ["1.1.1.1"], "c.example.com": ["3.3.3.3"]})
    seen = []

    async def on_result(result):
        seen.append(result.domain)

    worker = _make_worker(resolver, registry=registry, tasks=tasks, results=results, on_result=on_result)
    for label in ("a", "b", "c"):
        await tasks.send(label)

    run = asyncio.create_task(worker.run())
    await asyncio.sleep(0.05)
    # Generator still running: the worker keeps polling.
    assert not run.done()
    assert worker.handle.state is EngineState.RUNNING

    generator.mark_stopped()
    await asyncio.wait_for(run, timeout=2)

    assert worker.handle.state is EngineState.STOPPED
    assert worker.processed == 3
    assert worker.found == 2
    assert seen == ["a.example.com", "c.example.com"]
    assert [results.try_recv().domain for _ in range(2)] == ["a.example.com", "c.example.com"]
    with pytest.raises(ChannelEmpty):
        results.try_recv()


@pytest.mark.asyncio
async def test_run_without_http_factory_skips_probe():
    registry = StatusRegistry()
    registry.register(GENERATOR).mark_stopped()
    tasks: BoundedChannel[str] = BoundedChannel(10)
    results = BoundedChannel(10)
    await tasks.send("www")
    resolver = StubResolver(addresses={"www.example.com": ["1.2.3.4"]})
    worker = _make_worker(resolver, registry=registry, tasks=tasks, results=results)

    await asyncio.wait_for(worker.run(), timeout=2)

    result = results.try_recv()
    assert result.http_code is None
    assert result.title is None


@pytest.mark.asyncio
async def test_run_marks_stopped_when_resolver_fails_to_open():
    class Broken:
        async def __aenter__(self):
            raise RuntimeError("cannot open")

        async def __aexit__(self, *_):
            return None

    registry = StatusRegistry()
    worker = _make_worker(Broken(), registry=registry)
    with pytest.raises(RuntimeError):
        await worker.run()
    assert worker.handle.state is EngineState.STOPPED


@pytest.mark.asyncio
async def test_dropped_result_is_not_counted_as_found():
    registry = StatusRegistry()
    registry.register(GENERATOR).mark_stopped()
    tasks: BoundedChannel[str] = BoundedChannel(10)
    results = BoundedChannel(10)
    results.close()
    await tasks.send("www")
    seen = []

    async def on_result(result):
        seen.append(result)

    resolver = StubResolver(addresses={"www.example.com": ["1.2.3.4"]})
    worker = _make_worker(resolver, registry=registry, tasks=tasks, results=results, on_result=on_result)

    await asyncio.wait_for(worker.run(), timeout=2)

    assert worker.processed == 1
    assert worker.found == 0
    assert seen == []
