from .multimap import OrderedMultimap, EqualRange
from .sequence import END, Entry, EntrySequence
from .index import KeyIndex
from .ordering import by_key, by_value, from_less

__all__ = [
    "OrderedMultimap",
    "EqualRange",
    "END",
    "Entry",
    "EntrySequence",
    "KeyIndex",
    "by_key",
    "by_value",
    "from_less",
]
