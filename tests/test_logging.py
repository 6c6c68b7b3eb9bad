"""Tests for structlog setup: rendering, context merge, and stdlib routing."""

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from bondmarket.logging import NOISY_LOGGERS, get_logger, setup_logging


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Put the root logger and structlog config back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    noisy_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, noisy_level in noisy_levels.items():
        logging.getLogger(name).setLevel(noisy_level)
    structlog.reset_defaults()


def _lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


@pytest.mark.usefixtures("restore_logging")
class TestSetupLogging:
    def test_json_event_fields(self) -> None:
        stream = io.StringIO()
        setup_logging("INFO", "json", stream=stream)

        get_logger("bondmarket.tests").info("bonds_fetched", records=3)

        (line,) = _lines(stream)
        assert line["event"] == "bonds_fetched"
        assert line["records"] == 3
        assert line["level"] == "info"
        assert line["logger"] == "bondmarket.tests"
        assert line["service"] == "bondmarket"
        assert "timestamp" in line

    def test_bound_context_is_merged(self) -> None:
        stream = io.StringIO()
        setup_logging("DEBUG", "json", stream=stream)

        with structlog.contextvars.bound_contextvars(address="0xa11ce"):
            get_logger("bondmarket.tests").debug("bond_store_missing")
        get_logger("bondmarket.tests").debug("after_scope")

        first, second = _lines(stream)
        assert first["address"] == "0xa11ce"
        assert "address" not in second

    def test_level_filters(self) -> None:
        stream = io.StringIO()
        setup_logging("WARNING", "json", stream=stream)

        get_logger("bondmarket.tests").info("hidden")
        get_logger("bondmarket.tests").warning("shown")

        assert [line["event"] for line in _lines(stream)] == ["shown"]

    def test_stdlib_records_share_the_renderer(self) -> None:
        stream = io.StringIO()
        setup_logging("INFO", "json", stream=stream)

        logging.getLogger("some.library").warning("plain stdlib message")

        (line,) = _lines(stream)
        assert line["event"] == "plain stdlib message"
        assert line["service"] == "bondmarket"

    def test_noisy_loggers_raised_to_warning(self) -> None:
        setup_logging("DEBUG", "console", stream=io.StringIO())

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_console_format_is_not_json(self) -> None:
        stream = io.StringIO()
        setup_logging("INFO", "console", stream=stream)

        get_logger("bondmarket.tests").info("markets_listed")

        output = stream.getvalue()
        assert "markets_listed" in output
        with pytest.raises(json.JSONDecodeError):
            json.loads(output.splitlines()[0])
