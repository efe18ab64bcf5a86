"""Tests for structured logging setup."""

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from healthsignal.config import LoggingConfig
from healthsignal.observability import configure_logging


@pytest.fixture(autouse=True)
def restore_structlog() -> Iterator[None]:
    """configure_logging is process-global; undo it after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)


def test_json_format_renders_one_object_per_event(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="INFO", format="json"))

    structlog.get_logger("healthsignal.test").bind(component="test").info(
        "symptom_record_ingested", pincode="560001"
    )

    line = capsys.readouterr().err.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "symptom_record_ingested"
    assert event["component"] == "test"
    assert event["pincode"] == "560001"
    assert event["level"] == "info"
    assert event["logger"] == "healthsignal.test"
    assert "timestamp" in event


def test_level_filter_drops_lower_events(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="WARNING", format="json"))

    log = structlog.get_logger("healthsignal.test")
    log.info("region_queried")
    log.warning("emergency_detected", keywords=["stroke"])

    output = capsys.readouterr().err
    assert "region_queried" not in output
    assert "emergency_detected" in output


def test_console_format_is_human_readable(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="DEBUG", format="console"))

    structlog.get_logger("healthsignal.test").debug("region_aggregate_built", total=3)

    output = capsys.readouterr().err
    assert "region_aggregate_built" in output
    assert "total" in output
    with pytest.raises(json.JSONDecodeError):
        json.loads(output.strip().splitlines()[-1])
