"""Unit tests for ResultPersister."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from lp_common.errors import ResultPersistenceError, SinkError
from lp_probe.models.run import RunConfig, RunResult
from lp_probe.services.result_persister import ResultPersister, write_result_file
from tests.helpers.probe_fakes import RecordingSink


pytestmark = [pytest.mark.unit, pytest.mark.unit_probe]


def _result() -> RunResult:
    result = RunResult(uuid="run-1", transport="http", metrics={"totalRequests": 10})
    result.add_load_config(RunConfig(transport="http", resource_number=3))
    return result


class TestLocalResultFile:
    """Load-bearing local artifact."""

    def test_writes_json_payload(self, tmp_path: Path) -> None:
        target = tmp_path / "result.json"
        persister = ResultPersister(result_path=target)

        persister.persist(_result(), [])

        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["uuid"] == "run-1"
        assert data["loadConfigs"][0]["resourceNumber"] == 3
        assert "externalId" not in data
        assert "comment" not in data

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "result.json"
        target.write_text("stale content that is much longer than the new payload" * 50)

        write_result_file(target, "{}")

        assert target.read_text() == "{}"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "dir" / "result.json"
        write_result_file(target, "{}")
        assert target.exists()

    def test_write_failure_propagates(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")
        persister = ResultPersister(result_path=blocker / "result.json")
        journal: list[tuple[str, str]] = []

        with pytest.raises(ResultPersistenceError):
            persister.persist(_result(), [RecordingSink("a", journal)])

        assert journal == []


class TestSinkFanOut:
    """Best-effort sink persistence."""

    def test_each_sink_runs_full_lifecycle_in_order(self) -> None:
        journal: list[tuple[str, str]] = []
        sinks = [RecordingSink("a", journal), RecordingSink("b", journal)]

        errors = ResultPersister(params={"k": "v"}).persist(_result(), sinks)

        assert errors == []
        assert journal == [
            ("a", "initialize"), ("a", "save"), ("a", "close"),
            ("b", "initialize"), ("b", "save"), ("b", "close"),
        ]
        assert sinks[0].saved[0].uuid == "run-1"

    def test_failing_sink_does_not_block_others(self, caplog: pytest.LogCaptureFixture) -> None:
        journal: list[tuple[str, str]] = []
        first = RecordingSink("first", journal)
        second = RecordingSink("second", journal, fail_on="save")
        third = RecordingSink("third", journal)

        with caplog.at_level(logging.WARNING):
            errors = ResultPersister().persist(_result(), [first, second, third])

        for name in ("first", "third"):
            assert [stage for sink, stage in journal if sink == name] == [
                "initialize", "save", "close",
            ]
        assert len(errors) == 1
        assert isinstance(errors[0], SinkError)
        assert errors[0].sink == "second"
        assert errors[0].stage == "save"
        assert "second" in caplog.text

    def test_failed_sink_is_still_closed(self) -> None:
        journal: list[tuple[str, str]] = []
        sink = RecordingSink("flaky", journal, fail_on="initialize")

        ResultPersister().persist(_result(), [sink])

        assert journal == [("flaky", "initialize"), ("flaky", "close")]

    def test_close_failure_is_reported(self) -> None:
        journal: list[tuple[str, str]] = []
        sink = RecordingSink("leaky", journal, fail_on="close")

        errors = ResultPersister().persist(_result(), [sink])

        assert [e.stage for e in errors] == ["close"]
        assert journal.count(("leaky", "close")) == 1

    def test_non_runtime_errors_are_contained(self) -> None:
        journal: list[tuple[str, str]] = []
        sink = RecordingSink("weird", journal, fail_on="save", error=MemoryError("huge"))
        other = RecordingSink("fine", journal)

        errors = ResultPersister().persist(_result(), [sink, other])

        assert errors[0].cause.__class__ is MemoryError
        assert ("fine", "close") in journal

    def test_result_unchanged_by_sink_failure(self) -> None:
        result = _result()
        before = result.to_json()
        journal: list[tuple[str, str]] = []

        ResultPersister().persist(result, [RecordingSink("x", journal, fail_on="save")])

        assert result.to_json() == before
