"""Tests for the probe error taxonomy."""

from __future__ import annotations

from pathlib import Path

import pytest

from lp_common.errors import (
    ConfigRetrievalTimeoutError,
    EngineError,
    LPError,
    SinkError,
    TransportError,
    error_to_payload,
    wrap_error,
)


pytestmark = [pytest.mark.unit, pytest.mark.unit_common]


def test_error_to_payload_normalizes_context() -> None:
    err = EngineError(
        "boom",
        context={
            "path": Path("/tmp/probe"),
            "count": 3,
            "nested": {"value": Path("nested")},
            "items": [Path("a"), "b"],
        },
    )
    payload = error_to_payload(err)
    assert payload["error_type"] == "EngineError"
    assert payload["error"] == "boom"
    assert payload["error_context"]["path"].endswith("probe")
    assert payload["error_context"]["count"] == 3
    assert payload["error_context"]["nested"]["value"] == "nested"
    assert payload["error_context"]["items"][0] == "a"


def test_wrap_error_sets_cause() -> None:
    cause = OSError("refused")
    err = wrap_error(TransportError, "GET /stats/start failed", context={"path": "/stats/start"}, cause=cause)
    assert isinstance(err, LPError)
    assert err.__cause__ is cause
    assert err.to_dict() == {
        "type": "TransportError",
        "message": "GET /stats/start failed",
        "context": {"path": "/stats/start"},
    }


def test_config_timeout_is_a_timeout_error() -> None:
    err = ConfigRetrievalTimeoutError(attempts=121, waited_seconds=120.0, max_seconds=120.0)
    assert isinstance(err, TimeoutError)
    assert err.attempts == 121
    assert err.context["max_seconds"] == 120.0
    assert "120.0s" in str(err)


def test_sink_error_carries_stage() -> None:
    cause = RuntimeError("disk full")
    err = SinkError("directory", cause, stage="save")
    assert err.sink == "directory"
    assert err.stage == "save"
    assert err.cause is cause
    assert err.__cause__ is cause
    assert "during save" in str(err)
