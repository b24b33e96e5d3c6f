"""Logging setup (stdlib logging, JSON or pretty output)."""
