"""Bundled reaction catalog."""
