"""Protocols implemented by the adapters."""

from core.interfaces.client import RegistryClient

__all__ = ["RegistryClient"]
