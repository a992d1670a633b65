"""Run orchestration, summary, progress and column suggestion services."""
