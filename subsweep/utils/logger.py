"""Logging setup for SUBSWEEP.

Every module logs through a child of the ``subsweep`` logger.  The CLI calls
:func:`configure_logging` once per run to pick the console level from
``--verbose``/``--silent`` and to attach an optional log file.  Until then
records propagate to the standard :mod:`logging` root untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

ROOT_LOGGER = "subsweep"

_THEME = Theme(
    {
        "subsweep.domain": "bold green",
        "subsweep.address": "cyan",
    }
)

_FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(stage)s] %(message)s"


class ResultHighlighter(RegexHighlighter):
    """Colour host names and IP addresses in console log lines."""

    base_style = "subsweep."
    highlights = [
        r"(?P<address>\b\d{1,3}(?:\.\d{1,3}){3}\b)",
        r"(?P<domain>\b(?:[a-z0-9-]+\.)+[a-z]{2,}\b)",
    ]


class StageFilter(logging.Filter):
    """Tag records with the pipeline stage that emitted them.

    ``subsweep.engines.worker`` becomes ``worker``; records from outside a
    stage module keep the last component of their logger name.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.stage = record.name.rsplit(".", 1)[-1]
        return True


def resolve_level(verbose: bool = False, silent: bool = False) -> int:
    """Map the CLI verbosity flags to a log level.

    ``--verbose`` wins over ``--silent`` so a debugging run is never muted.
    """
    if verbose:
        return logging.DEBUG
    if silent:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    verbose: bool = False,
    silent: bool = False,
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Install the console and optional file handlers on the ``subsweep`` logger.

    Calling it again replaces the handlers of the previous call.

    Args:
        verbose: Log per-candidate DNS/HTTP failures (``DEBUG``).
        silent: Only warnings and errors reach the console.
        log_file: Also write every record, at ``DEBUG``, to this file.
        console: Console for the handler (defaults to stderr).

    Returns:
        The configured ``subsweep`` logger.
    """
    level = resolve_level(verbose, silent)

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console or Console(stderr=True, theme=_THEME),
        highlighter=ResultHighlighter(),
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(level)
    root.addHandler(console_handler)

    root_level = level
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(StageFilter())
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(file_handler)
        root_level = logging.DEBUG

    root.setLevel(root_level)
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Return the logger for *name* inside the ``subsweep`` hierarchy."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
