"""Retrieval of the run configuration from the coordinator."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from lp_common.errors import TransportError
from lp_probe.models.run import RunConfig
from lp_probe.services.http_client import ProbeHttpClient

logger = logging.getLogger(__name__)


class ConfigFetcher:
    """Single-attempt coordinator query; absence is signalled with None."""

    def __init__(
        self,
        client: ProbeHttpClient,
        *,
        path: str = "/test/loadConfig",
        timeout_seconds: float = 10.0,
        log: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self.path = path
        self.timeout_seconds = timeout_seconds
        self._log = log or logger

    def fetch(self) -> RunConfig | None:
        try:
            response = self._client.get(self.path, timeout=self.timeout_seconds)
        except TransportError as exc:
            self._log.info("Fail to retrieve run config: %s", exc)
            return None

        if response.status == 204:
            return None
        if not response.ok:
            self._log.warning(
                "Get run config returned %s, content: %s", response.status, response.body
            )
            return None
        if not response.body.strip():
            return None
        try:
            return RunConfig.model_validate_json(response.body)
        except ValidationError as exc:
            self._log.warning("Unreadable run config payload: %s", exc)
            return None
