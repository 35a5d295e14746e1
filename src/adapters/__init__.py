"""Adapters to the outside world (HTTP, files)."""
