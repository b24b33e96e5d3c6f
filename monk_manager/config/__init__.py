"""Configuration loading (pydantic-settings + YAML)."""
