import random

from pytest import mark

from ordered_multimap import END, OrderedMultimap


def render(table):
    return " ".join(f"{key}:{value}" for key, value in table)


def test_order_preservation():
    table = OrderedMultimap()
    for key, value in [("a", 1), ("b", 2), ("a", 3), ("c", 4)]:
        table.insert(key, value)
    assert render(table) == "a:1 b:2 a:3 c:4"


def test_duplicate_key_multiplicity():
    table = OrderedMultimap()
    for value in (10, 11, 12):
        table.insert("x", value)
    table.insert("y", 0)
    assert table.count("x") == 3
    assert [v for k, v in table if k == "x"] == [10, 11, 12]


def test_sort_both_directions():
    table = OrderedMultimap([("c", 3), ("a", 1), ("b", 2), ("a", 4)])
    handles = list(table)
    table.sort()
    assert render(table) == "a:1 a:4 b:2 c:3"
    table.sort(reverse=True)
    assert render(table) == "c:3 b:2 a:1 a:4"
    assert [h.as_tuple() for h in handles] == [("c", 3), ("a", 1), ("b", 2), ("a", 4)]
    for first, second in zip(table, list(table)[1:]):
        assert not first.key < second.key


def test_erase_by_key_removes_all_and_only():
    table = OrderedMultimap([("d", 1), ("d", 2), ("e", 3)])
    table.erase("d")
    assert render(table) == "e:3"
    assert len(table) == 1
    assert table.count("d") == 0


def test_erase_by_key_value_removes_at_most_one():
    table = OrderedMultimap([("a", 1), ("a", 2), ("a", 3)])
    assert table.erase("a", 2) == 1
    assert [v for _, v in table] == [1, 3]
    assert table.erase("a", 999) == 0
    assert [v for _, v in table] == [1, 3]
    assert table.count("a") == 2


def test_merge_semantics():
    table1 = OrderedMultimap([("a", 1), ("b", 2)])
    table2 = OrderedMultimap([("c", 3), ("a", 4)])
    table1.merge(table2)
    assert render(table1) == "a:1 b:2 c:3 a:4"
    assert len(table2) == 0


def test_extract_removes_and_returns_in_order():
    table = OrderedMultimap([("x", 100), ("y", 200), ("x", 101), ("x", 102)])
    assert table.extract("x") == [100, 101, 102]
    assert table.count("x") == 0
    assert table.to_list() == [("y", 200)]


def test_copy_independence():
    original = OrderedMultimap([("a", 10), ("b", 20), ("a", 30)])
    clone = original.copy()
    clone.insert("z", 0)
    clone.erase("a")
    clone.sort(reverse=True)
    assert original.to_list() == [("a", 10), ("b", 20), ("a", 30)]
    assert original.count("a") == 2
    assert original.find("a").value == 10


def test_demo_walkthrough():
    table = OrderedMultimap()
    for key, value in [("a", 1), ("b", 2), ("a", 3), ("c", 4), ("b", 5)]:
        table.insert(key, value)
    table.sort(reverse=True)
    assert render(table) == "c:4 b:2 b:5 a:1 a:3"
    table.sort()
    assert render(table) == "a:1 a:3 b:2 b:5 c:4"
    table.erase("a")
    assert render(table) == "b:2 b:5 c:4"
    handle = table.find("b")
    if handle is not END:
        table.erase(handle)
    assert render(table) == "b:5 c:4"
    table.insert("d", 9)
    table.insert("d", 10)
    table.insert("e", 11)
    assert render(table) == "b:5 c:4 d:9 d:10 e:11"


def check_consistent(table):
    entries = list(table)
    assert len(entries) == len(table) == len(table._index)
    keys = {entry.key for entry in entries}
    for key in keys:
        expected = [entry for entry in entries if entry.key == key]
        assert list(table.equal_range(key)) == expected
        assert table.count(key) == len(expected)
    assert sorted(table.distinct_keys()) == sorted(keys)


@mark.parametrize("seed", range(5))
def test_random_operations_keep_structures_consistent(seed):
    rng = random.Random(seed)
    table = OrderedMultimap()
    shadow = []
    handles = []
    for step in range(400):
        op = rng.random()
        key = rng.choice("abcdef")
        if op < 0.45:
            value = rng.randrange(10)
            handles.append(table.insert(key, value))
            shadow.append((key, value))
        elif op < 0.55:
            table.erase(key)
            shadow = [pair for pair in shadow if pair[0] != key]
        elif op < 0.65 and handles:
            handle = rng.choice(handles)
            if handle.attached:
                position = table.index_of(handle)
                assert table.erase(handle) is table.at(position)
                del shadow[position]
        elif op < 0.75:
            value = rng.randrange(10)
            removed = table.erase(key, value)
            if (key, value) in shadow:
                shadow.remove((key, value))
                assert removed == 1
            else:
                assert removed == 0
        elif op < 0.8:
            table.sort(key=lambda e: e.value)
            shadow.sort(key=lambda pair: pair[1])
        elif op < 0.85:
            other = OrderedMultimap([(key, step), (key, step + 1)])
            handles.extend(other)
            table.merge(other)
            shadow.extend([(key, step), (key, step + 1)])
        elif op < 0.9:
            assert table.extract(key) == [v for k, v in shadow if k == key]
            shadow = [pair for pair in shadow if pair[0] != key]
        else:
            value = rng.randrange(10)
            table.update(key, value)
            if any(k == key for k, _ in shadow):
                shadow = [(k, value if k == key else v) for k, v in shadow]
            else:
                shadow.append((key, value))
        assert table.to_list() == shadow
    check_consistent(table)
