"""Run orchestration engine for the probe."""
