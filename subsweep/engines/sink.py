"""Result sink: drains the result channel into the output file."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import IO, Optional

from subsweep.core.channel import BoundedChannel
from subsweep.core.errors import ChannelEmpty
from subsweep.core.models import ResolveResult
from subsweep.core.status import WORKER, StageHandle, StatusRegistry
from subsweep.utils.logger import get_logger

logger = get_logger(__name__)

FIELD_SEPARATOR = " - "


def format_result_line(result: ResolveResult) -> str:
    """Render *result* as ``domain - addresses - cnames - http_code - title``.

    Address and CNAME lists and the title are written as JSON literals; a
    missing status code becomes ``0`` and a missing title ``""``.
    """
    fields = [
        result.domain,
        json.dumps(list(result.addresses)),
        json.dumps(list(result.cnames)),
        str(result.http_code or 0),
        json.dumps(result.title or "", ensure_ascii=False),
    ]
    return FIELD_SEPARATOR.join(fields) + "\n"


class ResultSink:
    """Pipeline stage writing one line per result.

    The output file is truncated when the sink starts and every result is
    appended and flushed as soon as it is received.  The sink stops once all
    workers are stopped and the result channel is empty.
    """

    def __init__(
        self,
        output_path: str,
        results: BoundedChannel[ResolveResult],
        registry: StatusRegistry,
        handle: StageHandle,
        poll_interval: float = 1.0,
    ) -> None:
        self.output_path = Path(output_path)
        self.results = results
        self.registry = registry
        self.handle = handle
        self._poll_interval = poll_interval
        self.written = 0
        self.failed = 0

    async def run(self) -> None:
        self.handle.mark_running()
        logger.debug("Result sink started, writing to %s", self.output_path)
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with self.output_path.open("w", encoding="utf-8") as fh:
                await self._drain(fh)
        finally:
            self.handle.mark_stopped()
        logger.info(
            "Result sink finished: %d written, %d failed (%s)",
            self.written,
            self.failed,
            self.output_path,
        )

    async def _drain(self, fh: IO[str]) -> None:
        while True:
            try:
                result = self.results.try_recv()
            except ChannelEmpty:
                if self.registry.all_stopped(WORKER):
                    return
                await asyncio.sleep(self._poll_interval)
                continue
            self.write(fh, result)

    def write(self, fh: IO[str], result: ResolveResult) -> Optional[str]:
        """Append *result* to *fh*; failures are logged and the result dropped."""
        line = format_result_line(result)
        try:
            fh.write(line)
            fh.flush()
        except (OSError, ValueError) as exc:
            self.failed += 1
            logger.error("Writing result failed, line: %r, error: %s", line, exc)
            return None
        self.written += 1
        return line
