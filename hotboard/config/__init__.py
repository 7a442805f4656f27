"""Configuration - settings and the static source list."""
