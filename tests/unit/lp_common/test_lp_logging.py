"""Tests for structlog-backed logging configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from lp_common.logging import bind_run_context, clear_run_context, configure_logging


pytestmark = [pytest.mark.unit, pytest.mark.unit_common]


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_env_overrides_level_and_file(restore_root_logger, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    log_file = tmp_path / "probe.log"
    monkeypatch.setenv("LP_LOG_LEVEL", "warning")
    monkeypatch.setenv("LP_LOG_FILE", str(log_file))
    monkeypatch.setenv("LP_LOG_JSON", "1")

    configure_logging(force=True)
    logging.getLogger("lp_probe.test").warning("Fail to %s stats", "start")

    root = restore_root_logger
    assert root.level == logging.WARNING
    assert len(root.handlers) == 2
    for handler in root.handlers:
        handler.flush()
    record = json.loads(log_file.read_text().strip().splitlines()[-1])
    assert record["event"] == "Fail to start stats"
    assert record["level"] == "warning"


def test_debug_flag_wins(restore_root_logger, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LP_LOG_LEVEL", "ERROR")
    monkeypatch.delenv("LP_LOG_FILE", raising=False)

    configure_logging(debug=True, force=True)

    assert restore_root_logger.level == logging.DEBUG


def test_existing_handlers_kept_without_force(restore_root_logger) -> None:
    sentinel = logging.NullHandler()
    restore_root_logger.addHandler(sentinel)

    configure_logging(level="INFO")

    assert sentinel in restore_root_logger.handlers


def test_run_context_is_merged_into_records(restore_root_logger, tmp_path: Path) -> None:
    log_file = tmp_path / "probe.log"
    configure_logging(json=True, log_file=str(log_file), force=True)

    bind_run_context(target="http://target:8080", loader_number=3)
    try:
        logging.getLogger("lp_probe.test").info("Start probe load generator run")
    finally:
        clear_run_context()
    logging.getLogger("lp_probe.test").info("Probe main end")

    for handler in restore_root_logger.handlers:
        handler.flush()
    during, after = [json.loads(line) for line in log_file.read_text().strip().splitlines()[-2:]]
    assert during["target"] == "http://target:8080"
    assert during["loader_number"] == 3
    assert "target" not in after
