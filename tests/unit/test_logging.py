"""
Unit tests for the structured logging stack.

Covers LogContext propagation, ContextFilter defaults, JSONFormatter
output and the queue-backed setup/shutdown cycle.
"""

import json
import logging
import sys

import pytest

from stepscientists.core.config import Config
from stepscientists.core.logging import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    clear_log_context,
    get_log_context,
    get_logging_health,
    setup_logging,
    shutdown_logging,
)


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        name="stepscientists.modules.progression.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.mark.unit
class TestLogContext:
    """Test ambient context binding."""

    def test_context_bound_inside_block_only(self):
        with LogContext(player_id="p-1", operation="sync_steps") as ctx:
            assert get_log_context()["player_id"] == "p-1"
            assert get_log_context()["correlation_id"] == ctx.context["correlation_id"]

        assert get_log_context() == {}

    def test_nested_context_inherits_correlation_id(self):
        with LogContext(player_id="p-1") as outer:
            with LogContext(operation="claim_milestone_reward"):
                inner = get_log_context()

        assert inner["player_id"] == "p-1"
        assert inner["correlation_id"] == outer.context["correlation_id"]

    async def test_async_context_manager(self):
        async with LogContext(player_id="p-2", operation="switch_mode"):
            assert get_log_context()["operation"] == "switch_mode"

        assert "operation" not in get_log_context()

    def test_extra_fields_and_explicit_correlation_id(self):
        with LogContext(operation="claim_daily_bonus", correlation_id="req-42", request="r-1"):
            context = get_log_context()

        assert context == {
            "operation": "claim_daily_bonus",
            "correlation_id": "req-42",
            "request": "r-1",
        }


@pytest.mark.unit
class TestContextFilter:
    """Test record enrichment."""

    def test_defaults_without_context(self):
        record = _record()

        assert ContextFilter().filter(record) is True
        assert record.player_id == "N/A"
        assert record.operation == "N/A"
        assert record.component == "service"

    def test_explicit_extra_wins_over_context(self):
        """A per-call extra is not overwritten by the ambient context."""
        record = _record(operation="log_domain_events")

        with LogContext(player_id="p-1", operation="sync_steps"):
            ContextFilter().filter(record)

        assert record.operation == "log_domain_events"
        assert record.player_id == "p-1"


@pytest.mark.unit
class TestJSONFormatter:
    """Test JSON log line structure."""

    def test_context_and_extra_fields(self):
        # Arrange
        record = _record(
            "Domain event: player.milestone_claimed",
            player_id="p-1",
            operation="N/A",
            event_name="player.milestone_claimed",
            threshold_steps=5_000,
        )

        # Act
        payload = json.loads(JSONFormatter().format(record))

        # Assert
        assert payload["message"] == "Domain event: player.milestone_claimed"
        assert payload["level"] == "INFO"
        assert payload["player_id"] == "p-1"
        assert "operation" not in payload
        assert payload["extra"] == {
            "event_name": "player.milestone_claimed",
            "threshold_steps": 5_000,
        }

    def test_exception_included(self):
        try:
            raise ValueError("bad reading")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        payload = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad reading" in payload["exception"]


@pytest.mark.unit
class TestSetupLogging:
    """Test the queue-backed setup/shutdown cycle."""

    @pytest.fixture
    def isolated_root(self, monkeypatch, tmp_path):
        root = logging.getLogger()
        saved_handlers = list(root.handlers)
        saved_level = root.level
        monkeypatch.setattr(Config, "LOGS_DIR", tmp_path)

        yield tmp_path

        shutdown_logging()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    def test_setup_writes_json_file(self, isolated_root):
        # Arrange
        setup_logging(file_output=True)
        logger = logging.getLogger("stepscientists.test")

        # Act
        with LogContext(player_id="p-7", operation="sync_steps"):
            logger.info("Steps recorded", extra={"steps_added": 1_200})
        shutdown_logging()

        # Assert
        lines = (isolated_root / "stepscientists_daily.json.log").read_text().splitlines()
        entries = [json.loads(line) for line in lines]
        recorded = [e for e in entries if e["message"] == "Steps recorded"]
        assert len(recorded) == 1
        assert recorded[0]["player_id"] == "p-7"
        assert recorded[0]["operation"] == "sync_steps"
        assert recorded[0]["extra"]["steps_added"] == 1_200

    def test_setup_is_idempotent_and_reports_health(self, isolated_root):
        # Act
        setup_logging(file_output=False)
        setup_logging(file_output=False)
        health = get_logging_health()

        # Assert
        assert health["initialized"]
        assert health["queue_max_size"] > 0
        assert health["records_dropped"] == 0
        assert len(logging.getLogger().handlers) == 1

        shutdown_logging()
        assert not get_logging_health()["initialized"]
