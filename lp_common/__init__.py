"""Shared helpers for load-probe."""

from lp_common.api import LPError, configure_logging

__all__ = ["configure_logging", "LPError"]
