"""Caches for parsed schema and query files.

Parsing a large schema dominates generation time when many query files
share it, so loaders accept a cache keyed by path.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DocumentCache(Protocol[T]):
    def get_or_load(self, path: Path, load: Callable[[Path], T]) -> T:
        """Return the cached value for ``path``, calling ``load`` on a miss."""
        ...


class FileCache(Generic[T]):
    """Process-wide cache; entries are never invalidated."""

    def __init__(self):
        self._entries: dict[Path, T] = {}
        self._lock = threading.Lock()

    def get_or_load(self, path: Path, load: Callable[[Path], T]) -> T:
        key = Path(path).resolve()
        with self._lock:
            if key in self._entries:
                logger.debug("Cache hit: %s", key)
                return self._entries[key]
            logger.debug("Cache miss: %s", key)
            value = load(key)
            self._entries[key] = value
            return value

    def __len__(self) -> int:
        return len(self._entries)


class NoCache(Generic[T]):
    """Loads on every call."""

    def get_or_load(self, path: Path, load: Callable[[Path], T]) -> T:
        return load(Path(path))
