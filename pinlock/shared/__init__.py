"""Shared helpers used by adapters and entrypoints."""
