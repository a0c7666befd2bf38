"""Probe settings (canonical CLI/runtime definition)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from lp_common.config.env import parse_float_env


class ProbeTimings(BaseModel):
    """Cadences and deadlines used by the orchestrator."""

    config_poll_interval: float = Field(default=1.0, gt=0, description="Seconds between coordinator polls")
    config_max_wait: float = Field(default=120.0, gt=0, description="Seconds to wait for a run configuration before aborting")
    request_timeout: float = Field(default=10.0, gt=0, description="Per-request timeout for coordinator calls in seconds")
    progress_period: float = Field(default=2.0, gt=0, description="Seconds between live progress reports")

    @classmethod
    def from_env(cls, base: "ProbeTimings | None" = None) -> "ProbeTimings":
        """Overlay ``LP_*`` environment overrides onto ``base`` (or defaults)."""
        current = base or cls()
        overrides = {
            "config_poll_interval": parse_float_env(os.environ.get("LP_CONFIG_POLL_INTERVAL")),
            "config_max_wait": parse_float_env(os.environ.get("LP_CONFIG_MAX_WAIT")),
            "request_timeout": parse_float_env(os.environ.get("LP_REQUEST_TIMEOUT")),
            "progress_period": parse_float_env(os.environ.get("LP_PROGRESS_PERIOD")),
        }
        data = current.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(data)


class ProbeEndpoints(BaseModel):
    """Fixed paths exposed by the target server and the coordinator."""

    server_info: str = Field(default="/test/info/", description="Target identity path")
    load_config: str = Field(default="/test/loadConfig", description="Coordinator run configuration path")
    stats_start: str = Field(default="/stats/start", description="Path starting server-side stats")
    stats_stop: str = Field(default="/stats/stop", description="Path stopping server-side stats")

    @field_validator("server_info", "load_config", "stats_start", "stats_stop")
    @classmethod
    def _require_leading_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            return f"/{value}"
        return value


class ProbeSettings(BaseModel):
    """Main configuration for a probe run."""

    # Target server
    scheme: str = Field(default="http", description="Target scheme (http or https)")
    host: str = Field(default="localhost", description="Target host name or address")
    port: int = Field(default=8080, gt=0, lt=65536, description="Target port")

    # Run identity
    transport: str = Field(default="http", description="Transport kind recorded in the run configuration")
    instance_number: int = Field(default=0, ge=0, description="Loader instance number")
    server_version: Optional[str] = Field(default=None, description="Version used when the server does not report one")

    # Execution
    shared_threads: int = Field(default=0, ge=0, description="Max threads of the shared monitored pool (0 disables it)")
    resources_path: Optional[Path] = Field(default=None, description="Resource tree file (YAML or JSON)")
    skip_config_retrieval: bool = Field(default=False, description="Skip retrieving the run configuration")

    # Output
    result_path: Optional[Path] = Field(default=None, description="Path of the JSON result file")
    dynamic_params: Dict[str, str] = Field(default_factory=dict, description="Free-form key/value parameters (-D)")

    timings: ProbeTimings = Field(default_factory=ProbeTimings, description="Polling cadences and deadlines")
    endpoints: ProbeEndpoints = Field(default_factory=ProbeEndpoints, description="Server and coordinator paths")

    @field_validator("scheme")
    @classmethod
    def _validate_scheme(cls, value: str) -> str:
        scheme = value.strip().lower()
        if scheme not in {"http", "https"}:
            raise ValueError(f"scheme must be http or https, got: {value}")
        return scheme

    @model_validator(mode="after")
    def _validate_host_not_empty(self) -> "ProbeSettings":
        if not self.host or not self.host.strip():
            raise ValueError("ProbeSettings: 'host' must be non-empty")
        return self

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    def param(self, key: str) -> Optional[str]:
        """Return a dynamic parameter only when it is a non-empty string."""
        value = self.dynamic_params.get(key)
        if isinstance(value, str) and value:
            return value
        return None
