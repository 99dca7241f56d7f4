"""Logging setup and offline evaluation helpers."""
