"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from runview.config.models import LoggingConfig, LogOutputConfig
from runview.core.logging import (
    clear_run_id,
    configure_logging,
    get_log_file_path,
    get_logger,
    get_run_id,
    run_context,
    set_run_id,
)


class TestRunIdCorrelation:
    """Run ID context variable tests."""

    def setup_method(self) -> None:
        """Clear run ID before each test."""
        clear_run_id()

    def test_given_run_id_when_set_then_can_retrieve(self) -> None:
        """Run ID can be set and retrieved."""
        result = set_run_id("run-123")

        assert result == "run-123"
        assert get_run_id() == "run-123"

    def test_given_no_id_when_set_then_generates_uuid(self) -> None:
        """Set generates UUID-based ID when none provided."""
        rid = set_run_id()

        assert len(rid) == 12  # uuid4().hex[:12]

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        """Clear removes the current run ID."""
        set_run_id("to-clear")

        clear_run_id()

        assert get_run_id() is None

    def test_given_run_context_when_exited_then_previous_id_restored(self) -> None:
        """run_context binds for the block only."""
        set_run_id("outer")

        with run_context("inner") as rid:
            assert rid == "inner"
            assert get_run_id() == "inner"

        assert get_run_id() == "outer"

    def test_given_run_id_when_bound_then_in_structlog_context(self) -> None:
        """The id is a plain structlog context variable."""
        set_run_id("ctx-1")

        assert structlog.contextvars.get_contextvars()["run_id"] == "ctx-1"


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_run_id()

    def teardown_method(self) -> None:
        for handler in list(logging.getLogger().handlers):
            logging.getLogger().removeHandler(handler)
            handler.close()
        clear_run_id()

    def test_given_simple_params_when_configured_then_single_stderr_handler(self) -> None:
        """Simple configuration installs one console handler."""
        configure_logging(level="DEBUG")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert get_log_file_path() is None

    def test_given_reconfigure_when_called_twice_then_handlers_replaced(self) -> None:
        """Reconfiguring does not stack handlers."""
        configure_logging()
        configure_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_given_file_output_when_logging_then_json_lines_with_run_id(
        self, tmp_path: Path
    ) -> None:
        """JSON file output carries the event name and run correlation ID."""
        # Given
        log_file = tmp_path / "logs" / "runview.log"
        config = LoggingConfig(
            level="INFO",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )
        configure_logging(config=config)
        set_run_id("abc123")

        # When
        get_logger("test").info("drain_completed", files=2)
        for handler in logging.getLogger().handlers:
            handler.flush()

        # Then
        assert get_log_file_path() == log_file
        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["event"] == "drain_completed"
        assert record["files"] == 2
        assert record["run_id"] == "abc123"
        assert record["logger"] == "test"

    def test_given_output_level_when_below_then_filtered(self, tmp_path: Path) -> None:
        """Per-output level drops records below it."""
        log_file = tmp_path / "warn.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file), level="WARNING")],
        )
        configure_logging(config=config)

        logger = get_logger()
        logger.info("quiet")
        logger.warning("loud")
        for handler in logging.getLogger().handlers:
            handler.flush()

        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
        assert events == ["loud"]

    def test_given_relative_destination_when_validated_then_rejected(self) -> None:
        """File destinations must be absolute."""
        with pytest.raises(ValueError, match="absolute"):
            LogOutputConfig(destination="relative/runview.log")
