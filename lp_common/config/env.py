"""Environment variable parsing utilities."""

from __future__ import annotations


def parse_bool_env(value: str | None) -> bool | None:
    """Parse a boolean from an environment variable string.

    Returns True for "1", "true", "yes", "on" (case-insensitive).
    Returns None if value is None.
    """
    if value is None:
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_float_env(value: str | None) -> float | None:
    """Parse a float; None when missing or malformed."""
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_key_values(tokens: list[str] | tuple[str, ...] | None) -> dict[str, str]:
    """Parse ``key=value`` tokens into a dict.

    Tokens without ``=`` or with an empty key are ignored. Later tokens win.
    Example: ["jenkins.buildId=42", "loadresult.comment=nightly"].
    """
    params: dict[str, str] = {}
    for token in tokens or ():
        token = token.strip()
        if not token or "=" not in token:
            continue
        key, raw_value = token.split("=", 1)
        key = key.strip()
        if not key:
            continue
        params[key] = raw_value.strip()
    return params
