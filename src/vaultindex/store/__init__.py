"""Entity persistence interface and the in-memory implementation."""

from vaultindex.store.repository import InMemoryRepository, Repository

__all__ = [
    "InMemoryRepository",
    "Repository",
]
