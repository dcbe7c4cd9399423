"""
Per-key locking for read-modify-write of whole blobs.
"""

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator, List


class KeyedLock:
    """
    Hands out one lock per key; entries are dropped once nobody holds them.

    Locks are not reentrant. Code that needs several keys must take them in
    a fixed order.
    """

    def __init__(self):
        self._guard = Lock()
        self._entries: Dict[str, List] = {}  # key -> [lock, holders]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, [Lock(), 0])
            entry[1] += 1

        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
