"""Runtime services shared across branch_history (telemetry)."""
