from abc import ABC, abstractmethod
from typing import Generic, Iterator, Optional, Tuple, TypeVar

V = TypeVar("V")


class IKeyValueStore(ABC, Generic[V]):
    """
    Synchronous keyed store behind the session registry and identity cache.

    The in-memory implementation serves a single process. Running more than
    one instance requires an implementation backed by a shared store.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[V]:
        pass

    @abstractmethod
    def set(self, key: str, value: V) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        pass

    @abstractmethod
    def items(self) -> Iterator[Tuple[str, V]]:
        """Snapshot of all entries; safe to delete while iterating"""
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass
