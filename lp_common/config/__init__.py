"""Configuration helpers for lp_common."""

from .env import parse_bool_env, parse_float_env, parse_key_values

__all__ = [
    "parse_bool_env",
    "parse_float_env",
    "parse_key_values",
]
