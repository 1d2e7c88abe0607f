"""Candidate generation strategies and the generator stage.

Two interchangeable strategies produce candidate labels:

* :class:`BruteForceStrategy` walks every label over :data:`CHARSET` for each
  length in an inclusive range.
* :class:`DictionaryStrategy` expands each line of a dictionary through
  :func:`~subsweep.generator.pattern.expand_line`.

:class:`CandidateGenerator` is the pipeline stage that pushes a strategy's
candidates onto the task channel and then marks itself stopped.
"""

from __future__ import annotations

import itertools
import string
from importlib import resources
from typing import Iterator, Optional, Union

from subsweep.core.channel import BoundedChannel
from subsweep.core.errors import ChannelClosed, DictionaryUnavailable
from subsweep.core.options import ScanOptions
from subsweep.core.status import StageHandle
from subsweep.generator.pattern import iter_dictionary
from subsweep.utils.logger import get_logger

logger = get_logger(__name__)

CHARSET = string.ascii_lowercase + string.digits + "-"

_DEFAULT_DICTIONARY = "default.txt"


class BruteForceStrategy:
    """Enumerate every label of length ``lo..hi`` over :data:`CHARSET`.

    Labels are produced lazily in lexicographic product order; labels that
    start with a hyphen are skipped because DNS does not allow them.
    """

    def __init__(self, lo: int, hi: int, charset: str = CHARSET) -> None:
        if lo < 1 or hi < lo:
            raise ValueError(f"Invalid length range {lo}-{hi}")
        self.lo = lo
        self.hi = hi
        self.charset = charset

    def iter_candidates(self) -> Iterator[str]:
        for length in range(self.lo, self.hi + 1):
            logger.info("Generating labels of length %d", length)
            for chars in itertools.product(self.charset, repeat=length):
                if chars[0] == "-":
                    continue
                yield "".join(chars)

    def describe(self) -> str:
        if self.lo == self.hi:
            return f"brute force, length {self.lo}"
        return f"brute force, lengths {self.lo}-{self.hi}"


class DictionaryStrategy:
    """Expand every entry of a dictionary file.

    ``path`` of ``None`` or ``""`` selects the dictionary bundled with the
    package.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or None

    @property
    def source(self) -> str:
        return self.path or f"<builtin:{_DEFAULT_DICTIONARY}>"

    def iter_candidates(self) -> Iterator[str]:
        """Yield expanded candidates line by line.

        Raises:
            DictionaryUnavailable: If the dictionary cannot be opened or read.
        """
        try:
            if self.path is None:
                logger.info("No dictionary specified, using the built-in one")
                text = (
                    resources.files("subsweep.data")
                    .joinpath(_DEFAULT_DICTIONARY)
                    .read_text(encoding="utf-8")
                )
                yield from iter_dictionary(text.splitlines())
                return
            with open(self.path, "r", encoding="utf-8", errors="replace") as fh:
                yield from iter_dictionary(fh)
        except OSError as exc:
            raise DictionaryUnavailable(self.source, exc) from exc

    def describe(self) -> str:
        return f"dictionary {self.source}"


Strategy = Union[BruteForceStrategy, DictionaryStrategy]


def build_strategy(options: ScanOptions) -> Strategy:
    """Select the generation strategy for *options*."""
    if options.dictionary_mode:
        return DictionaryStrategy(options.dict_path)
    assert options.length is not None
    lo, hi = options.length
    return BruteForceStrategy(lo, hi)


class CandidateGenerator:
    """Pipeline stage pushing candidates onto the task channel.

    Example::

        generator = CandidateGenerator(strategy, tasks, registry.register(GENERATOR))
        await generator.run()
    """

    def __init__(
        self,
        strategy: Strategy,
        channel: BoundedChannel[str],
        handle: StageHandle,
    ) -> None:
        self.strategy = strategy
        self.channel = channel
        self.handle = handle
        self.produced = 0
        self.dropped = 0

    async def run(self) -> None:
        """Send every candidate, then mark the generator stopped.

        Raises:
            DictionaryUnavailable: Propagated from the dictionary strategy.
        """
        self.handle.mark_running()
        logger.info("Candidate generator started (%s)", self.strategy.describe())
        try:
            for candidate in self.strategy.iter_candidates():
                try:
                    await self.channel.send(candidate)
                except ChannelClosed as exc:
                    self.dropped += 1
                    logger.warning("Dropping candidate %r: %s", candidate, exc)
                    continue
                self.produced += 1
        finally:
            self.handle.mark_stopped()
        logger.info(
            "Candidate generator finished: %d produced, %d dropped",
            self.produced,
            self.dropped,
        )
