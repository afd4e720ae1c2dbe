"""Generic object stores holding resources as untyped trees."""

from .base import GroupVersionResource, ObjectStore, ResourceKey
from .memory import InMemoryObjectStore

__all__ = [
    "GroupVersionResource",
    "InMemoryObjectStore",
    "ObjectStore",
    "ResourceKey",
]
