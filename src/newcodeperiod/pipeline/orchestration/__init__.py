"""Pipeline step primitives and the new code period step."""
