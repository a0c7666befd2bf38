"""Coordinated load-test probe."""
