"""Wildcard DNS pre-flight check.

When a zone answers for every name, every candidate "resolves" and the run
would only produce noise.  :class:`WildcardGuard` resolves a few labels that
should not exist and raises :class:`~subsweep.core.errors.WildcardDetected`
if any of them has an address.
"""

from __future__ import annotations

import random
import string
from typing import Any, List, Optional

from subsweep.core.errors import WildcardDetected
from subsweep.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PROBE_LABEL = "thisdomainneverexist"
_RANDOM_ALPHABET = string.ascii_lowercase + string.digits


def random_label(length: int = 5, rng: Optional[random.Random] = None) -> str:
    """Return a random lowercase alphanumeric label of *length* characters."""
    chooser = rng or random
    return "".join(chooser.choices(_RANDOM_ALPHABET, k=length))


class WildcardGuard:
    """Single-shot wildcard detector sharing the workers' DNS capability.

    Example::

        async with AsyncDNSResolver() as dns:
            await WildcardGuard(dns).check("example.com")
    """

    def __init__(
        self,
        resolver: Any,
        probe_label: str = DEFAULT_PROBE_LABEL,
        random_length: int = 5,
    ) -> None:
        self.resolver = resolver
        self.probe_label = probe_label
        self.random_length = random_length

    def probe_names(self, target: str) -> List[str]:
        labels = [self.probe_label, random_label(self.random_length)]
        return [f"{label}.{target}" for label in labels]

    async def check(self, target: str) -> None:
        """Probe synthetic names under *target*.

        Raises:
            WildcardDetected: If any probe name resolves to an address.
        """
        names = self.probe_names(target)
        logger.info("Checking wildcard resolution for %s", target)
        logger.debug("Wildcard probe names: %s", names)
        for name in names:
            addresses = await self.resolver.resolve(name)
            if addresses:
                raise WildcardDetected(target, name, addresses)
        logger.info("No wildcard resolution detected for %s", target)
