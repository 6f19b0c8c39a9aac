"""Expose the registry client for easy import."""

from .client import RegistryClient, create_client

__all__ = ["RegistryClient", "create_client"]
