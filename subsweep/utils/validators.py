"""Input validation utilities for SUBSWEEP.

Validates and normalises the target domain, the brute-force length grammar,
and nameserver lists before they reach the pipeline.
"""

from __future__ import annotations

import ipaddress
import re
from typing import List, Optional, Tuple

from subsweep.utils.logger import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Domain validation
# ---------------------------------------------------------------------------

# RFC-compliant hostname label regex (no leading/trailing hyphens, max 63 chars)
_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")
_LENGTH_RE = re.compile(r"^\d+$")


def _is_valid_domain(value: str) -> bool:
    """Return ``True`` if *value* looks like a valid domain name.

    Args:
        value: String to validate.

    Returns:
        ``True`` when *value* is a valid domain name.
    """
    if len(value) > 253:
        return False

    labels = value.split(".")
    if len(labels) < 2:
        return False

    return all(_LABEL_RE.match(label) for label in labels)


# ---------------------------------------------------------------------------
# Public validators
# ---------------------------------------------------------------------------


def validate_target(target: str) -> str:
    """Validate and normalise the domain to enumerate.

    Args:
        target: Raw target string supplied by the user.

    Returns:
        Lower-cased domain without surrounding whitespace or trailing dot.

    Raises:
        ValueError: When *target* is empty or not a domain name.
    """
    stripped = target.strip().rstrip(".")
    if not stripped:
        raise ValueError("Target must not be empty.")

    lower = stripped.lower()
    if _is_valid_domain(lower):
        return lower

    raise ValueError(f"Invalid target {stripped!r}. Expected a domain name such as example.com.")


def parse_length(spec: str) -> Tuple[int, int]:
    """Parse a brute-force length specification.

    Accepted forms are ``"N"`` (fixed length) and ``"A-B"`` (inclusive range
    with ``0 < A < B``).

    Args:
        spec: Length specification string.

    Returns:
        ``(lo, hi)`` tuple.

    Raises:
        ValueError: When *spec* does not follow the grammar.
    """
    stripped = spec.strip()
    parts = stripped.split("-")

    if len(parts) == 1:
        if not _LENGTH_RE.match(parts[0]):
            raise ValueError(f"Invalid length {spec!r}: expected N or A-B.")
        length = int(parts[0])
        if length < 1:
            raise ValueError(f"Length must be positive, got {spec!r}.")
        return length, length

    if len(parts) == 2:
        if not (_LENGTH_RE.match(parts[0]) and _LENGTH_RE.match(parts[1])):
            raise ValueError(f"Invalid length range {spec!r}: expected A-B.")
        lo, hi = int(parts[0]), int(parts[1])
        if lo < 1 or hi < 1:
            raise ValueError(f"Length range bounds must be positive, got {spec!r}.")
        if hi <= lo:
            raise ValueError(f"Length range end must be greater than start, got {spec!r}.")
        return lo, hi

    raise ValueError(f"Invalid length {spec!r}: expected N or A-B.")


def parse_nameservers(value: Optional[str]) -> List[str]:
    """Parse a comma-separated list of nameserver IPs.

    Malformed entries are skipped with a warning.

    Args:
        value: Raw CSV string (``None`` or empty yields an empty list).

    Returns:
        List of normalised IP address strings, in input order.
    """
    if not value:
        return []

    nameservers: List[str] = []
    for token in value.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            nameservers.append(str(ipaddress.ip_address(token)))
        except ValueError:
            logger.warning("Invalid nameserver IP %r, skipping", token)
    return nameservers
