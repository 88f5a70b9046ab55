"""
Store + lock, handed to request handlers.

One SharedStore exists per application. Handlers never see a bare Store;
they borrow it for the duration of one operation:

    with shared.read() as store:      # GET /feed, GET /post/...
        html = render_feed(store)

    with shared.write() as store:     # register, new post, like, ...
        store.register_user(username)

Everything inside the `with` block happens atomically with respect to other
requests: readers see either the state before a write or the state after
it, never half of one.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from ..core.rwlock import ReadWriteLock
from .state import Store


class SharedStore:
    """A Store guarded by a single ReadWriteLock."""

    def __init__(self, store: Optional[Store] = None):
        self._store = store if store is not None else Store()
        self._lock = ReadWriteLock()

    @contextmanager
    def read(self) -> Iterator[Store]:
        """Borrow the store under the shared lock. Do not mutate it."""
        with self._lock.read_locked():
            yield self._store

    @contextmanager
    def write(self) -> Iterator[Store]:
        """Borrow the store under the exclusive lock."""
        with self._lock.write_locked():
            yield self._store

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    def __repr__(self) -> str:
        with self.read() as store:
            return f"SharedStore({store!r})"
