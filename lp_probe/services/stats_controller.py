"""Toggle server-side statistics collection on the target."""

from __future__ import annotations

import logging

from lp_common.errors import TransportError
from lp_probe.services.http_client import ProbeHttpClient

logger = logging.getLogger(__name__)


class RemoteStatsController:
    """Idempotent start/stop signals; failures never stop the run."""

    def __init__(
        self,
        client: ProbeHttpClient,
        *,
        start_path: str = "/stats/start",
        stop_path: str = "/stats/stop",
        log: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self.start_path = start_path
        self.stop_path = stop_path
        self._log = log or logger

    def start(self) -> bool:
        return self._signal("start", self.start_path)

    def stop(self) -> bool:
        ok = self._signal("stop", self.stop_path)
        if ok:
            self._log.info("stop stats")
        return ok

    def _signal(self, action: str, path: str) -> bool:
        try:
            response = self._client.get(path)
        except TransportError as exc:
            self._log.warning("Fail to %s stats: %s", action, exc)
            return False
        if not response.ok:
            self._log.warning(
                "Fail to %s stats %s, content: %s", action, response.status, response.body
            )
            return False
        return True
