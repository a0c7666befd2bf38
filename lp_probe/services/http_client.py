"""Minimal HTTP client shared by the probe services."""

from __future__ import annotations

import http.client
import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib import error, parse, request

from lp_common.errors import TransportError

logger = logging.getLogger(__name__)


def _validate_http_url(url: str, label: str) -> str:
    parsed = parse.urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"{label} must be an http(s) URL, got: {url}")
    return url


def _read_error_body(exc: error.HTTPError) -> str:
    if not exc.fp:
        return ""
    try:
        return exc.read().decode("utf-8", errors="replace")
    except (http.client.HTTPException, OSError):
        return ""


@dataclass(frozen=True)
class HttpResponse:
    """Status and decoded body of a completed exchange."""

    status: int
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == 200

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


class ProbeHttpClient:
    """Blocking HTTP client with an explicit start/stop lifecycle.

    Every completed exchange is returned as an ``HttpResponse``, whatever its
    status; only transport failures raise ``TransportError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        user_agent: str = "load-probe",
    ) -> None:
        self.base_url = _validate_http_url(base_url.rstrip("/"), "Target base_url")
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self._lock = threading.Lock()
        self._started = False
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    def start(self) -> None:
        with self._lock:
            self._started = True
            self._stopped = False

    def stop(self) -> None:
        with self._lock:
            self._stopped = True

    def get(self, path: str, *, timeout: float | None = None) -> HttpResponse:
        return self.request("GET", path, timeout=timeout)

    def post_json(self, path_or_url: str, payload: Any, *, timeout: float | None = None) -> HttpResponse:
        return self.request("POST", path_or_url, payload=payload, timeout=timeout)

    def request(
        self,
        method: str,
        path_or_url: str,
        *,
        payload: Any = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        if not self.running:
            raise TransportError(
                "HTTP client is not running", context={"method": method, "path": path_or_url}
            )
        url = self._resolve_url(path_or_url)
        headers = {"Accept": "application/json", "User-Agent": self.user_agent}
        data = None
        if payload is not None:
            data = (payload if isinstance(payload, str) else json.dumps(payload)).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = request.Request(url, data=data, headers=headers, method=method)
        effective_timeout = self.timeout_seconds if timeout is None else timeout
        try:
            with request.urlopen(req, timeout=effective_timeout) as resp:  # nosec B310
                body = resp.read().decode("utf-8", errors="replace")
                return HttpResponse(resp.status, body, dict(resp.headers.items()))
        except error.HTTPError as exc:
            return HttpResponse(exc.code, _read_error_body(exc), dict(exc.headers.items()) if exc.headers else {})
        except (error.URLError, http.client.HTTPException, OSError) as exc:
            logger.debug("%s %s failed: %r", method, url, exc)
            raise TransportError(
                f"{method} {url} failed: {exc}",
                context={"method": method, "url": url, "timeout": effective_timeout},
                cause=exc,
            ) from exc

    def _resolve_url(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        if not path_or_url.startswith("/"):
            path_or_url = f"/{path_or_url}"
        return f"{self.base_url}{path_or_url}"
