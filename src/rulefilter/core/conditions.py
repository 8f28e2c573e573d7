from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterator, Tuple, Union

from .errors import ConditionError


def same_value(left: Any, right: Any) -> bool:
    """Equality that keeps booleans apart from numbers, as BSON stores do.

    Plain ``==`` says ``True == 1``; a document store compares them as
    different types and never matches one against the other.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return bool(left == right)


@dataclass(frozen=True)
class ValueRange:
    """Continuous interval; membership is decided by comparison.

    ``ValueRange(1, 5)`` contains ``2.5``; a Python ``range(1, 6)`` does not.
    """

    low: Any
    high: Any
    exclusive_end: bool = False

    def __contains__(self, value: object) -> bool:
        is_bool = isinstance(value, bool)
        if is_bool != isinstance(self.low, bool) or is_bool != isinstance(self.high, bool):
            return False
        try:
            if self.exclusive_end:
                return bool(self.low <= value < self.high)  # type: ignore[operator]
            return bool(self.low <= value <= self.high)  # type: ignore[operator]
        except TypeError:
            # incomparable types are simply not members
            return False


@dataclass(frozen=True)
class Equals:
    value: Any


@dataclass(frozen=True)
class OneOf:
    values: Union[tuple, range, ValueRange]

    def __contains__(self, value: object) -> bool:
        values = self.values
        if isinstance(values, ValueRange):
            return value in values
        if isinstance(values, range):
            return not isinstance(value, bool) and value in values
        return any(same_value(value, member) for member in values)

    @property
    def is_discrete(self) -> bool:
        return not isinstance(self.values, ValueRange)


@dataclass(frozen=True)
class Nested:
    items: Tuple[Tuple[str, "ConditionNode"], ...] = ()

    def __bool__(self) -> bool:
        return bool(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Tuple[str, "ConditionNode"]]:
        return iter(self.items)


ConditionNode = Union[Equals, OneOf, Nested]

EMPTY = Nested()

_COLLECTION_TYPES = (list, tuple, set, frozenset)


def _one_of(value: Any) -> OneOf:
    if isinstance(value, (range, ValueRange)):
        return OneOf(value)
    # Keep the given order and drop duplicates by (type, value) so that 1 and
    # True stay distinct members.
    members = []
    seen = set()
    for member in value:
        try:
            key = (type(member), member)
            if key in seen:
                continue
            seen.add(key)
        except TypeError:
            pass  # unhashable members (e.g. dicts) are kept as given
        members.append(member)
    return OneOf(tuple(members))


def parse_value(value: Any) -> ConditionNode:
    """Turn one condition value into a node."""
    if isinstance(value, (Equals, OneOf, Nested)):
        return value
    if isinstance(value, Mapping):
        return parse_condition(value)
    if isinstance(value, _COLLECTION_TYPES) or isinstance(value, (range, ValueRange)):
        return _one_of(value)
    return Equals(value)


def parse_condition(conditions: Mapping[str, Any] | Nested | None) -> Nested:
    """Build a condition tree from a plain mapping.

    Mappings become :class:`Nested`, collections, ranges and :class:`ValueRange`
    become :class:`OneOf`, everything else becomes :class:`Equals`::

        parse_condition({"owner_id": 42, "status": ["draft", "published"]})

    ``None`` and ``{}`` both yield the empty condition, which matches everything.
    """
    if conditions is None:
        return EMPTY
    if isinstance(conditions, Nested):
        return conditions
    if not isinstance(conditions, Mapping):
        raise ConditionError(
            f"conditions must be a mapping of attribute names, got {type(conditions).__name__}"
        )
    items = []
    for name, value in conditions.items():
        if not isinstance(name, str) or not name:
            raise ConditionError(f"attribute names must be non-empty strings, got {name!r}")
        items.append((name, parse_value(value)))
    return Nested(tuple(items))


def is_empty(condition: ConditionNode | None) -> bool:
    return isinstance(condition, Nested) and not condition.items


__all__ = [
    "ConditionNode",
    "EMPTY",
    "Equals",
    "Nested",
    "OneOf",
    "ValueRange",
    "is_empty",
    "parse_condition",
    "parse_value",
    "same_value",
]
