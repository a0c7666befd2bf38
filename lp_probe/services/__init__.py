"""Services used by the probe orchestrator."""
