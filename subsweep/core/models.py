"""Data containers passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ResolveResult:
    """A subdomain that resolved to at least one address or CNAME.

    Attributes:
        domain: Fully qualified subdomain.
        title: Page title from the HTTP probe, if one was fetched and found.
        http_code: HTTP status code from the probe, if it succeeded.
        addresses: IPv4 then IPv6 addresses.
        cnames: CNAME chain, nearest first.
    """

    domain: str
    title: Optional[str] = None
    http_code: Optional[int] = None
    addresses: Tuple[str, ...] = ()
    cnames: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "title": self.title,
            "http_code": self.http_code,
            "addresses": list(self.addresses),
            "cnames": list(self.cnames),
        }


@dataclass
class PipelineStats:
    """Counters collected over one pipeline run.

    Attributes:
        candidates: Candidates pushed onto the task channel.
        dropped: Candidates the generator could not push.
        resolved: Results produced by all workers.
        written: Result lines written by the sink.
        write_failures: Results the sink failed to write.
        duration: Wall-clock seconds spent in the pipeline.
    """

    candidates: int = 0
    dropped: int = 0
    resolved: int = 0
    written: int = 0
    write_failures: int = 0
    duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidates": self.candidates,
            "dropped": self.dropped,
            "resolved": self.resolved,
            "written": self.written,
            "write_failures": self.write_failures,
            "duration_seconds": round(self.duration, 2),
        }
