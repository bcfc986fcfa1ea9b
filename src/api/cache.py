from __future__ import annotations

import logging
from threading import RLock
from typing import Callable, Dict, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[str], None]


# PUBLIC_INTERFACE
class ListingCache:
    """
    Per-route cache of rendered collection listings.

    A cached value is served until the route is revalidated, after which the
    next read goes back to the loader. Listeners are told about every
    revalidated path so other dependents can drop their own renderings.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._entries: Dict[str, object] = {}
        # Bumped by every revalidation; a load only lands if it is unchanged.
        self._generations: Dict[str, int] = {}
        self._listeners: List[Listener] = []

    def get_or_load(self, path: str, loader: Callable[[], T]) -> T:
        with self._lock:
            if path in self._entries:
                return self._entries[path]  # type: ignore[return-value]
            generation = self._generations.get(path, 0)
        value = loader()
        with self._lock:
            if self._generations.get(path, 0) == generation:
                self._entries[path] = value
            else:
                logger.debug("Discarding listing for path=%s revalidated during load", path)
        return value

    def is_cached(self, path: str) -> bool:
        with self._lock:
            return path in self._entries

    def revalidate_path(self, path: str) -> None:
        """Mark the rendering for `path` stale and notify listeners."""
        with self._lock:
            self._entries.pop(path, None)
            self._generations[path] = self._generations.get(path, 0) + 1
            listeners = list(self._listeners)
        logger.debug("Revalidated listing path=%s", path)
        for listener in listeners:
            listener(path)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; return a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_cache = ListingCache()


# PUBLIC_INTERFACE
def get_listing_cache() -> ListingCache:
    """Return the process-wide listing cache."""
    return _cache
