"""Storage layer for MeshFlow."""

from meshflow.storage.base import DuplicateEdgeError, GraphStore
from meshflow.storage.memory import InMemoryGraphStore

__all__ = [
    "DuplicateEdgeError",
    "GraphStore",
    "InMemoryGraphStore",
]
