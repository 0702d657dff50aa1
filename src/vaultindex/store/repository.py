"""Keyed entity repository interface.

Trackers and the lock index depend only on this interface; the concrete
store (a subgraph store, SQL, ...) is provided by the persistence layer with
last-write-wins semantics.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Abstract load-by-key / save-by-key store for one entity type."""

    @abstractmethod
    def get(self, key: str) -> T | None:
        """Return the entity stored under key, or None if absent."""
        ...

    @abstractmethod
    def put(self, key: str, entity: T) -> None:
        """Store entity under key, replacing any previous value."""
        ...


class InMemoryRepository(Repository[T]):
    """Dict-backed repository, used by tests and single-process replays."""

    def __init__(self) -> None:
        self._entities: dict[str, T] = {}

    def get(self, key: str) -> T | None:
        return self._entities.get(key)

    def put(self, key: str, entity: T) -> None:
        self._entities[key] = entity

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, key: object) -> bool:
        return key in self._entities
