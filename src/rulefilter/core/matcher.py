from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

from .conditions import ConditionNode, Equals, Nested, OneOf, same_value

_COLLECTION_TYPES = (list, tuple, set, frozenset)


def read_attribute(obj: Any, name: str) -> Any:
    """Read *name* from *obj*.

    Mappings are indexed, everything else goes through ``getattr``. A missing
    attribute raises the host's own ``KeyError``/``AttributeError``.
    """
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


def _satisfies(attribute: Any, sub: ConditionNode) -> bool:
    if isinstance(sub, Nested):
        if isinstance(attribute, _COLLECTION_TYPES):
            return any(matches(element, sub) for element in attribute)
        return matches(attribute, sub)
    if isinstance(sub, OneOf):
        return attribute in sub
    if isinstance(sub, Equals):
        return same_value(attribute, sub.value)
    raise TypeError(f"unknown condition node: {sub!r}")


def matches(obj: Any, condition: Nested) -> bool:
    """Return True when *obj* satisfies every constraint of *condition*."""
    # No constraints means always permitted; do not rely on all() over an empty sequence.
    if not condition.items:
        return True
    for name, sub in condition.items:
        if not _satisfies(read_attribute(obj, name), sub):
            return False
    return True


def matches_any(obj: Any, conditions: Iterable[Nested]) -> bool:
    """Rule-level union: True when any condition matches. No conditions denies."""
    for condition in conditions:
        if matches(obj, condition):
            return True
    return False


__all__ = ["matches", "matches_any", "read_attribute"]
