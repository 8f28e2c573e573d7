import re
from dataclasses import dataclass, field
from typing import Any, List

import pytest

from rulefilter.core.conditions import ValueRange, parse_condition
from rulefilter.core.matcher import matches, matches_any, read_attribute


@dataclass
class Tag:
    name: str


@dataclass
class Article:
    owner_id: int
    status: str = "draft"
    tags: List[Tag] = field(default_factory=list)
    author: Any = None


def test_empty_condition_always_matches():
    assert matches(object(), parse_condition({})) is True
    assert matches(None, parse_condition(None)) is True
    assert matches({"anything": 1}, parse_condition({})) is True


def test_and_semantics_across_attributes():
    cond = parse_condition({"a": 1, "b": 2})
    assert matches({"a": 1, "b": 2}, cond)
    assert not matches({"a": 1, "b": 3}, cond)
    assert not matches({"a": 0, "b": 2}, cond)


def test_collection_existential():
    cond = parse_condition({"tags": {"name": "y"}})
    a = Article(owner_id=1, tags=[Tag("x"), Tag("y")])
    assert matches(a, cond)
    b = Article(owner_id=1, tags=[Tag("x"), Tag("z")])
    assert not matches(b, cond)
    assert not matches(Article(owner_id=1, tags=[]), cond)


def test_collection_of_mappings():
    cond = parse_condition({"tags": {"name": "y"}})
    assert matches({"tags": [{"name": "x"}, {"name": "y"}]}, cond)
    assert not matches({"tags": ({"name": "x"},)}, cond)


def test_single_nested_object_recurses():
    cond = parse_condition({"author": {"name": "ann", "address": {"city": "Oslo"}}})
    doc = {"author": {"name": "ann", "address": {"city": "Oslo"}}}
    assert matches(doc, cond)
    doc["author"]["address"]["city"] = "Rome"
    assert not matches(doc, cond)


def test_membership_semantics():
    cond = parse_condition({"status": ["draft", "published"]})
    assert matches(Article(1, status="draft"), cond)
    assert not matches(Article(1, status="archived"), cond)


def test_range_membership():
    assert matches({"n": 3}, parse_condition({"n": range(1, 5)}))
    assert not matches({"n": 5}, parse_condition({"n": range(1, 5)}))
    assert not matches({"n": 2.5}, parse_condition({"n": range(1, 5)}))
    assert matches({"n": 2.5}, parse_condition({"n": ValueRange(1, 5)}))


def test_owner_scenario():
    cond = parse_condition({"owner_id": 42})
    assert matches(Article(42), cond) is True
    assert matches(Article(7), cond) is False


def test_missing_attribute_propagates_host_error():
    cond = parse_condition({"nope": 1})
    with pytest.raises(AttributeError):
        matches(Article(1), cond)
    with pytest.raises(KeyError):
        matches({"a": 1}, cond)


def test_short_circuit_stops_before_missing_attribute():
    cond = parse_condition({"owner_id": 1, "nope": 1})
    assert matches(Article(2), cond) is False


def test_unhashable_attribute_against_set_is_not_member():
    assert not matches({"s": ["draft"]}, parse_condition({"s": {"draft"}}))


def test_evaluation_is_repeatable():
    cond = parse_condition({"tags": {"name": "y"}, "owner_id": [1, 2]})
    a = Article(2, tags=[Tag("y")])
    assert [matches(a, cond) for _ in range(3)] == [True, True, True]


def test_matches_any_union_and_fail_closed():
    c1 = parse_condition({"owner_id": 1})
    c2 = parse_condition({"status": "published"})
    assert matches_any(Article(1), [c1, c2])
    assert matches_any(Article(2, status="published"), [c1, c2])
    assert not matches_any(Article(2), [c1, c2])
    assert matches_any(Article(2), []) is False


def test_read_attribute_prefers_mapping_access():
    class Both(dict):
        name = "attr"

    assert read_attribute(Both(name="item"), "name") == "item"
    assert read_attribute(Tag("t"), "name") == "t"


def test_booleans_do_not_equal_numbers():
    assert matches({"flag": True}, parse_condition({"flag": True}))
    assert not matches({"flag": True}, parse_condition({"flag": 1}))
    assert not matches({"flag": 0}, parse_condition({"flag": False}))
    assert matches({"flag": True}, parse_condition({"flag": [1, True]}))
    assert not matches({"flag": True}, parse_condition({"flag": [1, 2]}))
    assert not matches({"flag": True}, parse_condition({"flag": range(0, 3)}))
    assert matches({"score": 2.0}, parse_condition({"score": 2}))


def test_pattern_value_compares_by_equality():
    assert not matches({"owner": "alice"}, parse_condition({"owner": re.compile("^a")}))
