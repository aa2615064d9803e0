from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class _End:
    """Sentinel handle meaning "no such entry"."""

    __slots__ = ()
    _instance: Optional["_End"] = None

    def __new__(cls) -> "_End":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "END"

    def __reduce__(self) -> str:
        return "END"


END = _End()


class Entry(Generic[K, V]):
    """
    A stored (key, value) record and, at the same time, the handle to it.

    The key is fixed for the lifetime of the entry since the key index
    files the entry under it; the value may be reassigned freely.
    """

    __slots__ = ("_key", "value", "_prev", "_next", "_owner")

    def __init__(self, key: K, value: V):
        self._key = key
        self.value = value
        self._prev: Optional[Entry[K, V]] = None
        self._next: Optional[Entry[K, V]] = None
        self._owner: Optional[EntrySequence] = None

    @property
    def key(self) -> K:
        return self._key

    @property
    def next(self) -> Union["Entry[K, V]", _End]:
        return self._next if self._next is not None else END

    @property
    def prev(self) -> Union["Entry[K, V]", _End]:
        return self._prev if self._prev is not None else END

    @property
    def attached(self) -> bool:
        return self._owner is not None

    def __iter__(self) -> Iterator[Any]:
        yield self._key
        yield self.value

    def as_tuple(self) -> tuple[K, V]:
        return (self._key, self.value)

    def __repr__(self) -> str:
        state = "" if self._owner is not None else ", detached"
        return f"Entry({self._key!r}, {self.value!r}{state})"


Handle = Union[Entry, _End]


class EntrySequence:
    """Doubly linked, node-stable storage of entries in iteration order."""

    __slots__ = ("_head", "_tail", "_size")

    def __init__(self) -> None:
        self._head: Optional[Entry] = None
        self._tail: Optional[Entry] = None
        self._size = 0

    def owns(self, entry: object) -> bool:
        return isinstance(entry, Entry) and entry._owner is self

    def append(self, entry: Entry) -> Entry:
        if entry._owner is not None:
            raise ValueError(f"{entry!r} already belongs to a sequence")
        entry._owner = self
        entry._prev = self._tail
        entry._next = None
        if self._tail is None:
            self._head = entry
        else:
            self._tail._next = entry
        self._tail = entry
        self._size += 1
        return entry

    def remove(self, entry: Entry) -> Handle:
        if not self.owns(entry):
            raise ValueError(f"{entry!r} is not in this sequence")
        after = entry._next
        if entry._prev is None:
            self._head = after
        else:
            entry._prev._next = after
        if after is None:
            self._tail = entry._prev
        else:
            after._prev = entry._prev
        entry._prev = entry._next = None
        entry._owner = None
        self._size -= 1
        return after if after is not None else END

    def reorder(self, key: Callable[[Entry], Any], reverse: bool = False) -> None:
        # sort references, then relink; a raising key leaves the links intact
        nodes = sorted(self, key=key, reverse=reverse)
        self._relink(nodes)
        logger.debug("reordered %d entries", len(nodes))

    def _relink(self, nodes: list[Entry]) -> None:
        prev: Optional[Entry] = None
        for node in nodes:
            node._prev = prev
            if prev is not None:
                prev._next = node
            prev = node
        if prev is not None:
            prev._next = None
        self._head = nodes[0] if nodes else None
        self._tail = prev

    def splice(self, other: "EntrySequence") -> list[Entry]:
        if other is self:
            return []
        moved = list(other)
        for node in moved:
            node._owner = self
        if other._head is not None:
            if self._tail is None:
                self._head = other._head
            else:
                self._tail._next = other._head
                other._head._prev = self._tail
            self._tail = other._tail
            self._size += other._size
        other._head = other._tail = None
        other._size = 0
        return moved

    def clear(self) -> None:
        node = self._head
        while node is not None:
            after = node._next
            node._prev = node._next = None
            node._owner = None
            node = after
        self._head = self._tail = None
        self._size = 0

    def front(self) -> Handle:
        return self._head if self._head is not None else END

    def back(self) -> Handle:
        return self._tail if self._tail is not None else END

    def at(self, position: int) -> Handle:
        if position < 0 or position >= self._size:
            return END
        if position <= self._size // 2:
            node = self._head
            for _ in range(position):
                node = node._next
        else:
            node = self._tail
            for _ in range(self._size - 1 - position):
                node = node._prev
        return node

    def index_of(self, entry: Handle) -> int:
        if not self.owns(entry):
            raise ValueError(f"{entry!r} is not in this sequence")
        position = 0
        node = entry._prev
        while node is not None:
            position += 1
            node = node._prev
        return position

    def walk(self, begin: Handle, end: Handle = END) -> Iterator[Entry]:
        """Yield the entries of the half-open span [begin, end)."""
        if begin is END:
            return
        if not self.owns(begin):
            raise ValueError(f"{begin!r} is not in this sequence")
        node: Optional[Entry] = begin
        while node is not None and node is not end:
            after = node._next
            yield node
            node = after

    def __iter__(self) -> Iterator[Entry]:
        node = self._head
        while node is not None:
            # read the link first so the yielded node may be removed
            after = node._next
            yield node
            node = after

    def __reversed__(self) -> Iterator[Entry]:
        node = self._tail
        while node is not None:
            before = node._prev
            yield node
            node = before

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __repr__(self) -> str:
        return f"EntrySequence({[e.as_tuple() for e in self]!r})"
