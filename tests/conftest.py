"""Shared pytest fixtures for the SUBSWEEP test suite."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from subsweep.core.config import Config
from subsweep.core.options import ScanOptions


class StubResolver:
    """In-memory DNS capability usable as an async context manager."""

    def __init__(
        self,
        addresses: Optional[Dict[str, List[str]]] = None,
        cnames: Optional[Dict[str, List[str]]] = None,
        fail: Optional[set] = None,
    ) -> None:
        self.addresses = addresses or {}
        self.cnames = cnames or {}
        self.fail = fail or set()
        self.queries: List[str] = []

    async def __aenter__(self) -> "StubResolver":
        return self

    async def __aexit__(self, *_: object) -> None:
        return None

    async def resolve(self, domain: str) -> List[str]:
        self.queries.append(domain)
        if domain in self.fail:
            raise OSError(f"lookup failed for {domain}")
        return list(self.addresses.get(domain, []))

    async def resolve_cname(self, domain: str) -> List[str]:
        if domain in self.fail:
            raise OSError(f"lookup failed for {domain}")
        return list(self.cnames.get(domain, []))


class StubHTTPClient:
    """In-memory HTTP capability usable as an async context manager."""

    def __init__(self, pages: Optional[Dict[str, dict]] = None, error: Optional[Exception] = None) -> None:
        self.pages = pages or {}
        self.error = error
        self.requested: List[str] = []

    async def __aenter__(self) -> "StubHTTPClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        return None

    async def get(self, url: str) -> dict:
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        return self.pages.get(url, {"status": 404, "body": ""})


@pytest.fixture
def fast_config() -> Config:
    """Config with short polling intervals so pipelines finish quickly."""
    cfg = Config()
    cfg.pipeline.worker_poll_interval = 0.01
    cfg.pipeline.sink_poll_interval = 0.01
    return cfg


@pytest.fixture
def dictionary_options(tmp_path, fast_config):
    """Build dictionary-mode options for example.com from a list of lines."""

    def _build(lines: List[str], task_count: int = 3, fetch_title: bool = False) -> ScanOptions:
        dict_file = tmp_path / "words.txt"
        dict_file.write_text("".join(lines))
        return ScanOptions.build(
            "example.com",
            dict_path=str(dict_file),
            output=str(tmp_path / "out.txt"),
            task_count=task_count,
            fetch_title=fetch_title,
            config=fast_config,
        )

    return _build
