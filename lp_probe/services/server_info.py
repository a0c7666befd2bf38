"""Discovery of the identity of the server under test."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from lp_common.errors import TransportError
from lp_probe.models.run import ServerIdentity
from lp_probe.services.http_client import ProbeHttpClient

logger = logging.getLogger(__name__)


def resolve_server_identity(
    client: ProbeHttpClient,
    *,
    scheme: str,
    host: str,
    port: int,
    path: str = "/test/info/",
    version_override: str | None = None,
    log: logging.Logger | None = None,
) -> ServerIdentity:
    """Ask the target who it is.

    An unreachable server or an unreadable answer is not fatal: the identity
    then only carries the connection coordinates. A missing version falls
    back to ``version_override``.
    """
    log = log or logger
    fallback = ServerIdentity(scheme=scheme, host=host, port=port)
    identity = fallback
    try:
        response = client.get(path)
    except TransportError as exc:
        log.warning("Cannot retrieve server info from %s: %s", path, exc)
    else:
        if not response.ok:
            log.warning(
                "Server info returned %s, content: %s", response.status, response.body
            )
        elif response.body:
            try:
                payload = response.json()
                if isinstance(payload, dict):
                    payload.update({"scheme": scheme, "host": host, "port": port})
                    identity = ServerIdentity.model_validate(payload)
            except (ValueError, ValidationError) as exc:
                log.warning("Unreadable server info payload: %s", exc)
                identity = fallback
    return identity.with_version(version_override)
