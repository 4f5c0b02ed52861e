from typing import Dict, Iterator, Optional, Tuple, TypeVar

from pos_auth.app.services.key_value_store import IKeyValueStore

V = TypeVar("V")


class InMemoryKeyValueStore(IKeyValueStore[V]):
    """Dict-backed store, local to one process"""

    def __init__(self):
        self._data: Dict[str, V] = {}

    def get(self, key: str) -> Optional[V]:
        return self._data.get(key)

    def set(self, key: str, value: V) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def items(self) -> Iterator[Tuple[str, V]]:
        return iter(list(self._data.items()))

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)
