"""Built-in result sinks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Mapping

from lp_probe.models.run import RunResult
from lp_probe.services.http_client import ProbeHttpClient
from lp_probe.sinks.base import ResultSink
from lp_probe.sinks.registry import SinkPlugin

logger = logging.getLogger(__name__)

DIRECTORY_PARAM = "loadresult.store.dir"
WEBHOOK_URL_PARAM = "loadresult.store.webhook.url"
WEBHOOK_TIMEOUT_PARAM = "loadresult.store.webhook.timeout"


class DirectorySink(ResultSink):
    """Write each result as ``<uuid>.json`` under a directory."""

    name = "directory"

    def __init__(self) -> None:
        self._root: Path | None = None

    def initialize(self, params: Mapping[str, str]) -> None:
        root = Path(params[DIRECTORY_PARAM]).expanduser()
        root.mkdir(parents=True, exist_ok=True)
        self._root = root

    def save(self, result: RunResult) -> None:
        if self._root is None:
            raise RuntimeError("DirectorySink used before initialize()")
        target = self._root / f"{result.uuid}.json"
        target.write_text(result.to_json(indent=2), encoding="utf-8")
        logger.info("Saved result %s to %s", result.uuid, target)

    def close(self) -> None:
        self._root = None


class WebhookSink(ResultSink):
    """POST the result JSON to a URL."""

    name = "webhook"

    def __init__(self) -> None:
        self._client: ProbeHttpClient | None = None
        self.url: str | None = None
        self.timeout = 10.0

    def initialize(self, params: Mapping[str, str]) -> None:
        raw_timeout = params.get(WEBHOOK_TIMEOUT_PARAM)
        if raw_timeout:
            self.timeout = float(raw_timeout)
        self.url = params[WEBHOOK_URL_PARAM]
        self._client = ProbeHttpClient(self.url, timeout_seconds=self.timeout)
        self._client.start()

    def save(self, result: RunResult) -> None:
        if self._client is None or not self.url:
            raise RuntimeError("WebhookSink used before initialize()")
        response = self._client.post_json(self.url, result.to_json())
        if response.status >= 400:
            raise RuntimeError(f"Webhook returned status {response.status}: {response.body}")
        logger.info("Posted result %s to %s (%s)", result.uuid, self.url, response.status)

    def close(self) -> None:
        if self._client is not None:
            self._client.stop()
        self._client = None
        self.url = None


def _has_param(key: str) -> Callable[[Mapping[str, str]], bool]:
    def _check(params: Mapping[str, str]) -> bool:
        value = params.get(key)
        return isinstance(value, str) and bool(value.strip())

    return _check


def builtin_sinks() -> list[SinkPlugin]:
    return [
        SinkPlugin(
            name="directory",
            description=f"Write <uuid>.json files under -D{DIRECTORY_PARAM}=<dir>",
            factory=DirectorySink,
            is_active=_has_param(DIRECTORY_PARAM),
        ),
        SinkPlugin(
            name="webhook",
            description=f"POST the result to -D{WEBHOOK_URL_PARAM}=<url>",
            factory=WebhookSink,
            is_active=_has_param(WEBHOOK_URL_PARAM),
        ),
    ]
