"""Thread-safe request-scoped caches."""

import threading
from collections.abc import Callable, Hashable, Iterator
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ConcurrentCache(Generic[K, V]):
    """Dictionary with atomic compute-if-absent.

    Reads go straight to the underlying dict. Writers take a per-key lock so
    that concurrent first access to a key runs the factory once; a factory
    that raises leaves the key absent.
    """

    def __init__(self):
        self._data: dict[K, V] = {}
        self._lock = threading.Lock()
        self._key_locks: dict[K, threading.Lock] = {}

    def __contains__(self, key: K) -> bool:
        return key in self._data

    def __getitem__(self, key: K) -> V:
        return self._data[key]

    def __setitem__(self, key: K, value: V) -> None:
        with self._lock:
            self._data[key] = value

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._data))

    def get(self, key: K, default: V | None = None) -> V | None:
        return self._data.get(key, default)

    def items(self) -> list[tuple[K, V]]:
        with self._lock:
            return list(self._data.items())

    def pop(self, key: K, default: V | None = None) -> V | None:
        with self._lock:
            return self._data.pop(key, default)

    def remove_where(self, predicate: Callable[[K], bool]) -> None:
        """Drop every entry whose key matches predicate."""
        with self._lock:
            for key in [key for key in self._data if predicate(key)]:
                del self._data[key]

    def compute_if_absent(self, key: K, factory: Callable[[K], V]) -> V:
        """Return the cached value for key, computing it at most once.

        Args:
            key: Cache key
            factory: Called with key when no value is cached

        Returns:
            Cached or freshly computed value
        """
        try:
            return self._data[key]
        except KeyError:
            pass

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            try:
                return self._data[key]
            except KeyError:
                pass
            try:
                value = factory(key)
                with self._lock:
                    self._data[key] = value
                return value
            finally:
                with self._lock:
                    self._key_locks.pop(key, None)


class ConcurrentSet(Generic[K]):
    """Insertion-ordered set with serialized inserts."""

    def __init__(self):
        self._data: dict[K, None] = {}
        self._lock = threading.Lock()

    def add(self, item: K) -> None:
        with self._lock:
            self._data.setdefault(item, None)

    def __contains__(self, item: K) -> bool:
        return item in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[K]:
        with self._lock:
            return iter(list(self._data))


class ViewAliasTable:
    """Alias to rendered view SQL, kept in insertion order.

    The order is the dependency order of the views: a view rendered while
    rendering another is inserted first. Inserts are serialized so
    concurrent writers cannot reorder entries; re-inserting an alias keeps
    its original position.
    """

    def __init__(self):
        self._views: dict[str, str] = {}
        self._lock = threading.Lock()

    def add(self, alias: str, sql: str) -> None:
        with self._lock:
            self._views[alias] = sql

    def get(self, alias: str) -> str | None:
        return self._views.get(alias)

    def __contains__(self, alias: str) -> bool:
        return alias in self._views

    def __len__(self) -> int:
        return len(self._views)

    def items(self) -> list[tuple[str, str]]:
        with self._lock:
            return list(self._views.items())

    def to_dict(self) -> dict[str, str]:
        with self._lock:
            return dict(self._views)
