"""Client-facing API."""

from .client import CloudClient

__all__ = ["CloudClient"]
