"""Pipeline orchestration and analysis-scoped state."""
