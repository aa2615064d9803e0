from __future__ import annotations

import logging
from typing import Any, Hashable, Iterable, Iterator

from sortedcontainers import SortedDict

from .sequence import END, Entry, Handle

logger = logging.getLogger(__name__)


class KeyIndex:
    """
    Multi-valued lookup from key to the entries filed under it.

    Each key owns a bucket (a list of entries) kept in the iteration order
    of the sequence the entries live in. The index never owns entries.

    With ``ordered=True`` the buckets are held in a ``SortedDict`` so keys
    must be totally ordered as well as hashable; otherwise a plain ``dict``
    is used and only hashability is required.
    """

    __slots__ = ("_buckets", "_size", "ordered")

    def __init__(self, ordered: bool = False) -> None:
        self.ordered = ordered
        self._buckets: dict[Hashable, list[Entry]] = SortedDict() if ordered else {}
        self._size = 0

    def add(self, entry: Entry) -> None:
        bucket = self._buckets.get(entry.key)
        if bucket is None:
            # raises TypeError for unhashable or unorderable keys before any change
            self._buckets[entry.key] = [entry]
        else:
            bucket.append(entry)
        self._size += 1

    def extend(self, entries: Iterable[Entry]) -> None:
        added: list[Entry] = []
        try:
            for entry in entries:
                self.add(entry)
                added.append(entry)
        except BaseException:
            for entry in reversed(added):
                self.remove_one(entry)
            raise

    def remove_all(self, key: Hashable) -> list[Entry]:
        bucket = self._buckets.pop(key, None)
        if bucket is None:
            return []
        self._size -= len(bucket)
        return bucket

    def remove_one(self, entry: Entry) -> bool:
        bucket = self._buckets.get(entry.key)
        if bucket is None:
            return False
        if bucket[-1] is entry:
            bucket.pop()
        else:
            for i, candidate in enumerate(bucket):
                if candidate is entry:
                    del bucket[i]
                    break
            else:
                return False
        if not bucket:
            del self._buckets[entry.key]
        self._size -= 1
        return True

    def lookup_first(self, key: Hashable) -> Handle:
        bucket = self._buckets.get(key)
        return bucket[0] if bucket else END

    def lookup_range(self, key: Hashable) -> list[Entry]:
        return list(self._buckets.get(key, ()))

    def count(self, key: Hashable) -> int:
        bucket = self._buckets.get(key)
        return len(bucket) if bucket else 0

    def contains(self, key: Hashable) -> bool:
        return key in self._buckets

    __contains__ = contains

    def rebuild(self, entries: Iterable[Entry]) -> None:
        """Re-derive every bucket from ``entries``, taken in iteration order."""
        buckets: dict[Hashable, list[Entry]] = SortedDict() if self.ordered else {}
        size = 0
        for entry in entries:
            bucket = buckets.get(entry.key)
            if bucket is None:
                buckets[entry.key] = [entry]
            else:
                bucket.append(entry)
            size += 1
        self._buckets = buckets
        self._size = size
        logger.debug("rebuilt index over %d keys, %d entries", len(buckets), size)

    def keys(self) -> list[Any]:
        return list(self._buckets)

    def irange(self, minimum: Any = None, maximum: Any = None) -> Iterator[Any]:
        if not self.ordered:
            raise ValueError("key ranges need an ordered key index")
        return self._buckets.irange(minimum, maximum)

    def clear(self) -> None:
        self._buckets.clear()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        kind = "ordered" if self.ordered else "hashed"
        counts = {key: len(bucket) for key, bucket in self._buckets.items()}
        return f"KeyIndex({kind}, {counts!r})"
