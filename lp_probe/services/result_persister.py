"""Persist a run result locally and to the active result sinks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Mapping

from lp_common.errors import ResultPersistenceError, SinkError
from lp_probe.models.run import RunResult

logger = logging.getLogger(__name__)


def _sink_name(sink: object) -> str:
    return str(getattr(sink, "name", None) or sink.__class__.__name__)


def write_result_file(path: Path, payload: str) -> Path:
    """Overwrite ``path`` with the serialized result.

    Failures are raised as ``ResultPersistenceError``: the local artifact is
    the primary delivery path.
    """
    try:
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        path.unlink(missing_ok=True)
        path.write_text(payload, encoding="utf-8")
    except OSError as exc:
        raise ResultPersistenceError(
            "Failed to write result file", context={"path": path}, cause=exc
        ) from exc
    return path


class ResultPersister:
    """Write the local result file, then fan out to sinks best-effort."""

    def __init__(
        self,
        result_path: Path | None = None,
        params: Mapping[str, str] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._result_path = result_path
        self._params = dict(params or {})
        self._log = log or logger

    def persist(self, result: RunResult, sinks: Iterable[object]) -> list[SinkError]:
        payload = result.to_json()
        self._log.info("Run result json: %s", payload)
        if self._result_path is not None:
            write_result_file(self._result_path, payload)
            self._log.info("Result written to %s", self._result_path)

        errors: list[SinkError] = []
        for sink in sinks:
            error = self._save_to_sink(sink, result)
            if error is not None:
                errors.append(error)
        return errors

    def _save_to_sink(self, sink: object, result: RunResult) -> SinkError | None:
        name = _sink_name(sink)
        stage = "initialize"
        error: SinkError | None = None
        try:
            sink.initialize(self._params)  # type: ignore[attr-defined]
            stage = "save"
            sink.save(result)  # type: ignore[attr-defined]
            stage = "close"
            sink.close()  # type: ignore[attr-defined]
            self._log.info("Result %s saved to sink %s", result.uuid, name)
            return None
        except Exception as exc:
            error = SinkError(name, exc, stage=stage)
            self._log.warning("Ignore saving result error: %s", error, exc_info=exc)

        if stage != "close":
            try:
                sink.close()  # type: ignore[attr-defined]
            except Exception as exc:
                self._log.debug("Closing sink %s after failure raised: %s", name, exc)
        return error
