"""Dictionary line expansion.

A dictionary line is literal text optionally mixed with placeholders written
between a pair of ``%`` characters::

    www%NUMBER%      ->  www0 .. www9
    %ALPHA%-api      ->  a-api .. z-api
    a%ALPHA%%NUMBER%b -> aa0b .. az9b   (26 x 10 candidates)

Unknown placeholders such as ``%FOO%`` are kept verbatim.
"""

from __future__ import annotations

import string
from typing import Dict, Iterable, Iterator, List

PLACEHOLDER_POOLS: Dict[str, str] = {
    "%NUMBER%": string.digits,
    "%ALPHA%": string.ascii_lowercase,
    "%ALPHANUMBER%": string.digits + string.ascii_lowercase,
}

_LITERAL = 0
_PLACEHOLDER = 1


def tokenize_line(line: str) -> List[str]:
    """Split *line* into alternating literal and ``%...%`` segments.

    Placeholder segments keep their ``%`` delimiters.  An unterminated
    placeholder at the end of the line is flushed as-is.

    Args:
        line: A single dictionary entry.

    Returns:
        Ordered list of non-empty segments.
    """
    segments: List[str] = []
    buffer: List[str] = []
    state = _LITERAL

    for char in line:
        if char != "%":
            buffer.append(char)
            continue
        if state == _LITERAL:
            if buffer:
                segments.append("".join(buffer))
                buffer.clear()
            buffer.append(char)
            state = _PLACEHOLDER
        else:
            buffer.append(char)
            segments.append("".join(buffer))
            buffer.clear()
            state = _LITERAL

    if buffer:
        segments.append("".join(buffer))
    return segments


def expand_line(line: str) -> List[str]:
    """Expand one trimmed, non-comment dictionary line into candidates.

    Trailing dots are stripped first so FQDN-style entries (``"www."``) behave
    like their bare form.

    Args:
        line: Dictionary entry.

    Returns:
        Candidate labels in deterministic order: earlier segments vary
        slowest, each placeholder follows its character-set order.
    """
    line = line.rstrip(".")
    if not line:
        return []

    candidates = [""]
    for segment in tokenize_line(line):
        pool = PLACEHOLDER_POOLS.get(segment)
        if pool is None:
            candidates = [prefix + segment for prefix in candidates]
        else:
            candidates = [prefix + char for prefix in candidates for char in pool]
    return candidates


def iter_dictionary(lines: Iterable[str]) -> Iterator[str]:
    """Yield every candidate denoted by *lines*.

    Blank lines and lines starting with ``#`` (after trimming) are skipped.
    """
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield from expand_line(line)
