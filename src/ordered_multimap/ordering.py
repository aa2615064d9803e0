from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Callable, Optional

from .sequence import Entry

Comparator = Callable[[Entry, Entry], int]
Less = Callable[[Entry, Entry], bool]
SortKey = Callable[[Entry], Any]


def by_key(entry: Entry) -> Any:
    return entry.key


def by_value(entry: Entry) -> Any:
    return entry.value


def from_less(less: Less) -> Comparator:
    # strict weak ordering: neither a<b nor b<a means equivalent
    def compare(one: Entry, other: Entry) -> int:
        if less(one, other):
            return -1
        if less(other, one):
            return 1
        return 0

    return compare


def resolve_sort_key(key: Optional[SortKey] = None, cmp: Optional[Comparator] = None) -> SortKey:
    if key is not None and cmp is not None:
        raise ValueError("pass either key or cmp, not both")
    if cmp is not None:
        return cmp_to_key(cmp)
    if key is not None:
        return key
    return by_key
