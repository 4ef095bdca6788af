"""Shared service-level helpers for the new code period pipeline."""
