"""Validated run options.

:class:`ScanOptions` is the single object the pipeline trusts: it is built
once at startup from CLI values layered over :class:`~subsweep.core.config.Config`
and raises :class:`~subsweep.core.errors.ConfigurationError` for anything the
pipeline cannot run with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from subsweep.core.config import Config
from subsweep.core.errors import ConfigurationError
from subsweep.utils.validators import parse_length, parse_nameservers, validate_target

BUILTIN_DICTIONARY = ""


@dataclass
class ScanOptions:
    """Everything a single enumeration run needs.

    Attributes:
        target: Domain to enumerate (normalised).
        dict_path: Dictionary mode when not ``None``; ``""`` selects the
            built-in dictionary.
        length: Inclusive ``(lo, hi)`` brute-force range, ``None`` in
            dictionary mode.
        output_path: Result file path.
        task_count: Number of resolution workers.
        nameservers: Resolver IPs.
        check_wildcard: Run the wildcard pre-flight check.
        fetch_title: Probe resolved hosts over HTTP for status and title.
        config: The layered configuration the options were built from.
    """

    target: str
    dict_path: Optional[str] = None
    length: Optional[Tuple[int, int]] = None
    output_path: str = ""
    task_count: int = 25
    nameservers: List[str] = field(default_factory=list)
    check_wildcard: bool = True
    fetch_title: bool = True
    config: Config = field(default_factory=Config)

    def __post_init__(self) -> None:
        if not self.output_path:
            self.output_path = f"{self.target}.txt"

    @property
    def dictionary_mode(self) -> bool:
        return self.dict_path is not None

    @classmethod
    def build(
        cls,
        target: str,
        dict_path: Optional[str] = None,
        length: Optional[str] = None,
        output: Optional[str] = None,
        task_count: Optional[int] = None,
        nameserver: Optional[str] = None,
        check_wildcard: Optional[bool] = None,
        fetch_title: Optional[bool] = None,
        config: Optional[Config] = None,
    ) -> "ScanOptions":
        """Validate raw CLI values and return a :class:`ScanOptions`.

        ``None`` means "not given on the command line" and falls back to
        *config*.

        Raises:
            ConfigurationError: On any invalid or contradictory value.
        """
        cfg = config or Config()

        try:
            normalised = validate_target(target)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        if dict_path is not None and length is not None:
            raise ConfigurationError("--dict and --length are mutually exclusive.")
        if dict_path is None and length is None:
            raise ConfigurationError("One of --dict or --length is required.")

        bounds: Optional[Tuple[int, int]] = None
        if length is not None:
            try:
                bounds = parse_length(length)
            except ValueError as exc:
                raise ConfigurationError(str(exc)) from exc

        if dict_path and not Path(dict_path).is_file():
            raise ConfigurationError(f"Dictionary file not found: {dict_path}")

        count = cfg.general.task_count if task_count is None else task_count
        if count < 1:
            raise ConfigurationError(f"Task count must be at least 1, got {count}.")

        nameservers = parse_nameservers(nameserver) if nameserver else []
        if not nameservers:
            nameservers = list(cfg.dns.nameservers)

        if output:
            output_path = output
        else:
            output_path = str(Path(cfg.general.output_dir) / f"{normalised}.txt")

        return cls(
            target=normalised,
            dict_path=dict_path,
            length=bounds,
            output_path=output_path,
            task_count=count,
            nameservers=nameservers,
            check_wildcard=cfg.wildcard.enabled if check_wildcard is None else check_wildcard,
            fetch_title=cfg.http.fetch_title if fetch_title is None else fetch_title,
            config=cfg,
        )
