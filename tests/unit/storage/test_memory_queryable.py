import pytest

from rulefilter.storage.memory import InMemoryQueryable


def test_find_with_predicate():
    q = InMemoryQueryable([1, 2, 3, 4])
    assert q.find(lambda x: x % 2 == 0) == [2, 4]
    assert len(q) == 4
    q.add(6)
    assert q.find(lambda x: x > 4) == [6]


def test_find_rejects_non_callable_filter():
    with pytest.raises(TypeError):
        InMemoryQueryable([1]).find({"a": 1})


def test_contains_requires_membership_and_predicate():
    obj = {"a": 1}
    q = InMemoryQueryable([obj])
    assert q.contains(lambda o: True, obj)
    assert q.contains(lambda o: True, {"a": 1})
    assert not q.contains(lambda o: False, obj)
    assert not q.contains(lambda o: True, {"a": 2})
