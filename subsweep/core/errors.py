"""Exception types raised by SUBSWEEP.

Only configuration and resource-availability problems escape the pipeline;
per-candidate network errors are absorbed by the stage that hit them.
"""

from __future__ import annotations

from typing import List, Sequence


class SubsweepError(Exception):
    """Base class for all SUBSWEEP errors."""


class ConfigurationError(SubsweepError, ValueError):
    """Raised when run options are missing, contradictory, or malformed."""


class DictionaryUnavailable(SubsweepError):
    """Raised when the dictionary source cannot be read."""

    def __init__(self, source: str, reason: object) -> None:
        super().__init__(f"Cannot read dictionary {source!r}: {reason}")
        self.source = source


class WildcardDetected(SubsweepError):
    """Raised when a synthetic label under the target resolves to addresses."""

    def __init__(self, target: str, probe: str, addresses: Sequence[str]) -> None:
        super().__init__(
            f"Wildcard DNS detected for {target}: {probe} resolves to {list(addresses)}"
        )
        self.target = target
        self.probe = probe
        self.addresses: List[str] = list(addresses)


class ChannelClosed(SubsweepError):
    """Raised when sending to a channel that has been closed."""


class ChannelEmpty(SubsweepError):
    """Raised by a non-blocking receive on an empty channel."""
