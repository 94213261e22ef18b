"""Shared utilities for the backend."""
from utils.serialize import camel_keys, iso

__all__ = [
    "camel_keys",
    "iso",
]
