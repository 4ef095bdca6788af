"""DuckDB-backed settings store for new code period configuration."""
