"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from wit.config.models import LoggingConfig, LogOutputConfig
from wit.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)


class TestRequestIdCorrelation:
    """Request ID context variable tests."""

    def setup_method(self) -> None:
        clear_request_id()

    def test_given_request_id_when_set_then_can_retrieve(self) -> None:
        # When
        result = set_request_id("test-123")

        # Then
        assert result == "test-123"
        assert get_request_id() == "test-123"

    def test_given_no_id_when_set_then_generates_short_hex(self) -> None:
        rid = set_request_id()

        assert len(rid) == 12
        int(rid, 16)

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        # Given
        set_request_id("to-clear")

        # When
        clear_request_id()

        # Then
        assert get_request_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_request_id()

    def teardown_method(self) -> None:
        clear_request_id()
        logging.getLogger().handlers.clear()

    def test_given_file_output_when_log_then_json_lines_written(self, tmp_path: Path) -> None:
        # Given
        log_file = tmp_path / "wit.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )
        configure_logging(config=config)
        set_request_id("req-1")

        # When
        get_logger("test").info("cycle_published", seq=3)

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "cycle_published"
        assert data["seq"] == 3
        assert data["level"] == "info"
        assert data["request_id"] == "req-1"
        assert data["logger"] == "test"
        assert "timestamp" in data

    def test_given_bound_cycle_when_log_then_record_carries_cycle(self, tmp_path: Path) -> None:
        # Given
        log_file = tmp_path / "logs" / "wit.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )
        configure_logging(config=config)

        # When
        with structlog.contextvars.bound_contextvars(cycle=4):
            get_logger().debug("edits_during_cycle", paths=["src/a.ts"])
        get_logger().debug("after_cycle")

        # Then
        first, second = (json.loads(line) for line in log_file.read_text().splitlines())
        assert first["cycle"] == 4
        assert first["paths"] == ["src/a.ts"]
        assert "cycle" not in second

    def test_given_stdlib_logger_when_log_then_rendered_with_name_and_request_id(
        self, tmp_path: Path
    ) -> None:
        # Given
        log_file = tmp_path / "wit.log"
        config = LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))])
        configure_logging(config=config)
        set_request_id("req-9")

        # When
        logging.getLogger("wit.stdlib").warning("port in use")

        # Then
        data = json.loads(log_file.read_text().strip())
        assert data["event"] == "port in use"
        assert data["logger"] == "wit.stdlib"
        assert data["level"] == "warning"
        assert data["request_id"] == "req-9"

    def test_given_info_level_when_configure_then_access_log_quieted(self) -> None:
        configure_logging(level="INFO")

        assert logging.getLogger("uvicorn.access").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_given_multi_output_config_when_configure_then_levels_apply_per_output(
        self, tmp_path: Path
    ) -> None:
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content
        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content


class TestLogOutputConfig:
    """Output destination validation."""

    def test_relative_file_destination_rejected(self) -> None:
        with pytest.raises(ValueError):
            LogOutputConfig(destination="relative/wit.log")
