"""TOML configuration adapter."""
