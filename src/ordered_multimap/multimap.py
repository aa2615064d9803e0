from __future__ import annotations

import copy as _copy
import logging
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, Optional, TypeVar

from .index import KeyIndex
from .ordering import Comparator, SortKey, resolve_sort_key
from .sequence import END, Entry, EntrySequence, Handle

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


@dataclass(frozen=True, slots=True)
class EqualRange(Generic[K, V]):
    """The entries matching one key, in iteration order."""

    matches: tuple[Entry[K, V], ...] = ()

    @property
    def begin(self) -> Handle:
        return self.matches[0] if self.matches else END

    @property
    def end(self) -> Handle:
        return self.matches[-1].next if self.matches else END

    @property
    def contiguous(self) -> bool:
        if not self.matches:
            return True
        node = self.matches[0]
        for match in self.matches:
            if node is not match:
                return False
            node = node.next
        return True

    def values(self) -> list[V]:
        return [entry.value for entry in self.matches]

    def __iter__(self) -> Iterator[Entry[K, V]]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    def __getitem__(self, item):
        return self.matches[item]

    def __bool__(self) -> bool:
        return bool(self.matches)


class OrderedMultimap(Generic[K, V]):
    """
    Associative container keeping every (key, value) entry in insertion order.

    Keys may repeat. Entries live in an ``EntrySequence`` which defines the
    iteration order, and a ``KeyIndex`` files each entry under its key.
    Every mutating method updates both before returning.

    Handles returned by ``insert``, ``find`` and friends are the ``Entry``
    objects themselves. They stay valid until that entry is erased,
    extracted or cleared, whatever else happens to the container.
    """

    def __init__(
        self,
        items: Iterable[Any] = (),
        *,
        ordered_keys: bool = False,
        factory: Optional[Callable[..., V]] = None,
    ):
        self._entries = EntrySequence()
        self._index = KeyIndex(ordered=ordered_keys)
        self.factory = factory
        if isinstance(items, OrderedMultimap):
            pairs: Iterable[Any] = items.to_list()
        elif isinstance(items, Mapping):
            pairs = items.items()
        else:
            pairs = items
        for key, value in pairs:
            self.insert(key, value)

    @property
    def ordered_keys(self) -> bool:
        return self._index.ordered

    # -- insertion

    def _append(self, entry: Entry[K, V]) -> Entry[K, V]:
        # index first: a bad key must not leave a linked, unindexed entry
        self._index.add(entry)
        return self._entries.append(entry)

    def insert(self, key: K, value: V) -> Entry[K, V]:
        return self._append(Entry(key, value))

    def emplace(self, key: K, *args, **kwargs) -> Entry[K, V]:
        if self.factory is None:
            raise TypeError("emplace needs a value factory, pass factory= to the constructor")
        return self._append(Entry(key, self.factory(*args, **kwargs)))

    def update(self, key: K, value: V) -> Entry[K, V]:
        matches = self._index.lookup_range(key)
        if not matches:
            return self.insert(key, value)
        for entry in matches:
            entry.value = value
        return matches[0]

    # -- removal

    def erase(self, target: Any, value: Any = _MISSING) -> Any:
        """
        Remove entries.

        ``erase(entry)`` removes exactly that entry and returns its successor.
        ``erase(key)`` removes every entry with ``key`` and returns the first
        entry left after the first match. ``erase(key, value)`` removes the
        first entry matching both and returns how many were removed (0 or 1).
        Missing keys and foreign handles yield ``END`` (or 0).
        """
        if value is not _MISSING:
            return self._erase_pair(target, value)
        if isinstance(target, Entry) or target is END:
            return self._erase_entry(target)
        return self._erase_key(target)

    def _erase_entry(self, entry: Handle) -> Handle:
        if not self._entries.owns(entry):
            logger.debug("ignoring erase of %r, not held by this container", entry)
            return END
        self._index.remove_one(entry)
        return self._entries.remove(entry)

    def _erase_key(self, key: K) -> Handle:
        matches = self._index.remove_all(key)
        if not matches:
            return END
        # the first match is never preceded by another match
        before = matches[0].prev
        for entry in matches:
            self._entries.remove(entry)
        if before is END:
            return self._entries.front()
        return before.next

    def _erase_pair(self, key: K, value: V) -> int:
        for entry in self._index.lookup_range(key):
            if entry.value == value:
                self._index.remove_one(entry)
                self._entries.remove(entry)
                return 1
        return 0

    def extract(self, key: K) -> list[V]:
        matches = self._index.remove_all(key)
        for entry in matches:
            self._entries.remove(entry)
        return [entry.value for entry in matches]

    def clear(self) -> None:
        size = len(self._entries)
        self._entries.clear()
        self._index.clear()
        if size:
            logger.debug("cleared %d entries", size)

    # -- lookup

    def find(self, key: K) -> Handle:
        return self._index.lookup_first(key)

    def has(self, key: K) -> bool:
        return self._index.contains(key)

    def count(self, key: K) -> int:
        return self._index.count(key)

    def equal_range(self, key: K) -> EqualRange[K, V]:
        return EqualRange(tuple(self._index.lookup_range(key)))

    def distinct_keys(self) -> list[K]:
        return self._index.keys()

    def key_range(self, minimum: Any = None, maximum: Any = None) -> list[Entry[K, V]]:
        result: list[Entry[K, V]] = []
        for key in self._index.irange(minimum, maximum):
            result.extend(self._index.lookup_range(key))
        return result

    # -- positions

    def front(self) -> Handle:
        return self._entries.front()

    def back(self) -> Handle:
        return self._entries.back()

    def at(self, position: int) -> Handle:
        return self._entries.at(position)

    def index_of(self, entry: Handle) -> int:
        return self._entries.index_of(entry)

    def walk(self, begin: Handle, end: Handle = END) -> Iterator[Entry[K, V]]:
        return self._entries.walk(begin, end)

    # -- ordering

    def sort(self, key: Optional[SortKey] = None, *, cmp: Optional[Comparator] = None, reverse: bool = False) -> None:
        """
        Reorder the entries in place; the sort is stable.

        ``key`` maps an entry to its sort key and ``cmp`` is a three-way
        comparator of two entries; without either, entries are ordered by
        their key. Entries are relinked, never copied, so every handle keeps
        denoting the same record.
        """
        self._entries.reorder(resolve_sort_key(key, cmp), reverse=reverse)
        self._index.rebuild(self._entries)

    # -- whole-container operations

    def merge(self, other: OrderedMultimap[K, V]) -> None:
        if other is self:
            return
        moving = list(other._entries)
        self._index.extend(moving)
        self._entries.splice(other._entries)
        other._index.clear()
        logger.debug("merged %d entries", len(moving))

    def transfer(self) -> OrderedMultimap[K, V]:
        """Hand both structures over to a new container and leave this one empty."""
        target: OrderedMultimap[K, V] = OrderedMultimap(ordered_keys=self.ordered_keys, factory=self.factory)
        target._entries, self._entries = self._entries, target._entries
        target._index, self._index = self._index, target._index
        logger.debug("transferred %d entries", len(target))
        return target

    def copy(self) -> OrderedMultimap[K, V]:
        clone: OrderedMultimap[K, V] = OrderedMultimap(ordered_keys=self.ordered_keys, factory=self.factory)
        for entry in self._entries:
            clone._entries.append(Entry(entry.key, entry.value))
        clone._index.rebuild(clone._entries)
        logger.debug("copied %d entries", len(clone))
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo: dict) -> OrderedMultimap[K, V]:
        clone: OrderedMultimap[K, V] = OrderedMultimap(ordered_keys=self.ordered_keys, factory=self.factory)
        memo[id(self)] = clone
        for entry in self._entries:
            clone._entries.append(Entry(_copy.deepcopy(entry.key, memo), _copy.deepcopy(entry.value, memo)))
        clone._index.rebuild(clone._entries)
        return clone

    # -- snapshots

    def keys(self) -> list[K]:
        return [entry.key for entry in self._entries]

    def values(self) -> list[V]:
        return [entry.value for entry in self._entries]

    def to_list(self) -> list[tuple[K, V]]:
        return [entry.as_tuple() for entry in self._entries]

    # -- protocols

    def __iter__(self) -> Iterator[Entry[K, V]]:
        return iter(self._entries)

    def __reversed__(self) -> Iterator[Entry[K, V]]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    __contains__ = has

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedMultimap):
            return NotImplemented
        return self.to_list() == other.to_list()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_list()!r})"
