"""Tests for subsweep.utils.logger."""

from __future__ import annotations

import io
import logging

import pytest
from rich.console import Console
from rich.text import Text

from subsweep.utils.logger import (
    ROOT_LOGGER,
    ResultHighlighter,
    configure_logging,
    get_logger,
    resolve_level,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger(ROOT_LOGGER)
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    root.propagate = propagate


@pytest.mark.parametrize(
    "verbose, silent, expected",
    [
        (False, False, logging.INFO),
        (True, False, logging.DEBUG),
        (False, True, logging.WARNING),
        (True, True, logging.DEBUG),
    ],
)
def test_resolve_level(verbose, silent, expected):
    assert resolve_level(verbose, silent) == expected


def test_get_logger_names():
    assert get_logger("subsweep.engines.worker").name == "subsweep.engines.worker"
    assert get_logger("worker").name == "subsweep.worker"
    assert get_logger(ROOT_LOGGER).name == ROOT_LOGGER


def test_silent_hides_info_on_console():
    stream = io.StringIO()
    configure_logging(silent=True, console=Console(file=stream, width=200))
    log = get_logger("subsweep.engines.worker")

    log.info("Found: www.example.com ['1.2.3.4']")
    log.warning("Dropping result for api.example.com")

    output = stream.getvalue()
    assert "www.example.com" not in output
    assert "api.example.com" in output


def test_reconfigure_replaces_handlers():
    configure_logging(console=Console(file=io.StringIO()))
    root = configure_logging(verbose=True, console=Console(file=io.StringIO()))
    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG


def test_log_file_records_stage_and_debug(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    root = configure_logging(log_file=str(log_file), console=Console(file=io.StringIO()))
    assert root.level == logging.DEBUG

    get_logger("subsweep.engines.sink").debug("Writing to %s", "out.txt")
    for handler in root.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "[sink] Writing to out.txt" in content


def test_result_highlighter_marks_domains_and_addresses():
    text = Text("Found: www.example.com ['93.184.216.34']")
    ResultHighlighter().highlight(text)
    styles = {str(span.style) for span in text.spans}
    assert "subsweep.domain" in styles
    assert "subsweep.address" in styles
