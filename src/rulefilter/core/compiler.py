from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .conditions import ConditionNode, Equals, Nested, OneOf, ValueRange
from .errors import UnsupportedConditionShape

logger = logging.getLogger("rulefilter.compiler")


class FilterSentinel(enum.Enum):
    MATCH_ALL = "match_all"
    MATCH_NONE = "match_none"

    def __repr__(self) -> str:
        return "MatchAll" if self is FilterSentinel.MATCH_ALL else "MatchNone"


MatchAll = FilterSentinel.MATCH_ALL
MatchNone = FilterSentinel.MATCH_NONE

# Either a sentinel or the store's native filter value.
CompiledFilter = Union[FilterSentinel, Any]


def filter_kind(compiled: CompiledFilter) -> str:
    """Label used in logs and metrics: ``match_all``, ``match_none`` or ``native``."""
    if isinstance(compiled, FilterSentinel):
        return compiled.value
    return "native"


@dataclass(frozen=True)
class MongoFilterConfig:
    """Shape hints and limits for :class:`MongoFilterCompiler`.

    ``array_fields`` and ``document_fields`` hold dotted paths from the root
    document (``"tags"``, ``"author.books"``). Nested conditions on a declared
    array compile to ``$elemMatch``; on a declared embedded document they
    compile to dotted paths.
    """

    id_field: str = "_id"
    array_fields: frozenset = frozenset()
    document_fields: frozenset = frozenset()
    max_in_values: int = 10_000
    # BSON type the id field is guaranteed to have; combined with $exists: false
    # it yields a predicate no stored document can satisfy.
    never_match_type: str = "objectId"

    def __post_init__(self) -> None:
        object.__setattr__(self, "array_fields", frozenset(self.array_fields))
        object.__setattr__(self, "document_fields", frozenset(self.document_fields))
        overlap = self.array_fields & self.document_fields
        if overlap:
            raise ValueError(f"fields declared both as array and document: {sorted(overlap)}")
        if self.max_in_values < 1:
            raise ValueError("max_in_values must be positive")


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _add_clause(clauses: Dict[str, Any], key: str, value: Any) -> None:
    if key in clauses:
        # same path constrained twice (e.g. two flattened embedded documents)
        clauses.setdefault("$and", []).append({key: value})
    else:
        clauses[key] = value


class MongoFilterCompiler:
    """Translate condition trees into MongoDB query documents.

    The compiled filter selects exactly the documents for which
    :func:`rulefilter.core.matcher.matches` returns True. When a condition
    cannot be written that way, :class:`UnsupportedConditionShape` is raised
    instead of emitting an approximate filter.
    """

    def __init__(self, config: Optional[MongoFilterConfig] = None, **overrides: Any) -> None:
        if config is None:
            config = MongoFilterConfig(**overrides)
        elif overrides:
            raise TypeError("pass either a MongoFilterConfig or keyword overrides, not both")
        self.config = config

    # ------------------------------------------------------------------ public

    def compile(self, condition: Optional[Nested]) -> CompiledFilter:
        if condition is None:
            return MatchNone
        if not condition.items:
            return MatchAll
        clauses = self._clauses(condition, "", "")
        logger.debug("compiled condition into %d clause(s)", len(clauses))
        return clauses

    def compile_union(self, conditions: Iterable[Nested]) -> CompiledFilter:
        """Merge several granting conditions; a record passes if any of them does."""
        conds: Tuple[Nested, ...] = tuple(conditions)
        if not conds:
            return MatchNone
        if any(not c.items for c in conds):
            return MatchAll
        if len(conds) == 1:
            return self.compile(conds[0])
        return {"$or": [self._clauses(c, "", "") for c in conds]}

    def never_match(self) -> Dict[str, Any]:
        # An empty filter would match everything, so use an unsatisfiable id predicate.
        return {self.config.id_field: {"$exists": False, "$type": self.config.never_match_type}}

    def native(self, compiled: CompiledFilter) -> Dict[str, Any]:
        """Turn a compiled filter into a query document usable with ``find``."""
        if compiled is MatchAll:
            return {}
        if compiled is MatchNone:
            return self.never_match()
        if not isinstance(compiled, Mapping):
            raise TypeError(f"not a Mongo filter: {compiled!r}")
        return dict(compiled)

    # --------------------------------------------------------------- internals

    def _clauses(self, condition: Nested, schema_prefix: str, key_prefix: str) -> Dict[str, Any]:
        clauses: Dict[str, Any] = {}
        for name, sub in condition.items:
            self._check_name(name, schema_prefix)
            path = _join(schema_prefix, name)
            key = _join(key_prefix, name)
            if isinstance(sub, Nested):
                self._nested(clauses, sub, path, key)
            elif isinstance(sub, OneOf):
                self._reject_array(path, "membership test")
                _add_clause(clauses, key, self._one_of(sub, path))
            elif isinstance(sub, Equals):
                self._reject_array(path, "equality test")
                _add_clause(clauses, key, self._equals(sub, path))
            else:
                raise TypeError(f"unknown condition node: {sub!r}")
        return clauses

    def _nested(self, clauses: Dict[str, Any], sub: Nested, path: str, key: str) -> None:
        cfg = self.config
        if path in cfg.array_fields:
            if not sub.items:
                # any element satisfies an empty condition, so the array must be non-empty
                _add_clause(clauses, f"{key}.0", {"$exists": True})
            else:
                _add_clause(clauses, key, {"$elemMatch": self._clauses(sub, path, "")})
            return
        if path in cfg.document_fields:
            if not sub.items:
                _add_clause(clauses, key, {"$exists": True})
                return
            for k, v in self._clauses(sub, path, key).items():
                if k == "$and":
                    clauses.setdefault("$and", []).extend(v)
                else:
                    _add_clause(clauses, k, v)
            return
        leaf = self._single_leaf(sub, path)
        if leaf is None:
            raise UnsupportedConditionShape(
                path,
                "nested condition on a field of unknown shape; "
                "declare it in array_fields or document_fields",
            )
        suffix, node = leaf
        _add_clause(clauses, _join(key, suffix), node)

    def _single_leaf(self, sub: Nested, path: str) -> Optional[Tuple[str, Any]]:
        # A dotted path is lossless for both an embedded document and an array of
        # documents only when it ends in a single predicate.
        if len(sub.items) != 1:
            return None
        name, node = sub.items[0]
        self._check_name(name, path)
        child = _join(path, name)
        if child in self.config.array_fields or child in self.config.document_fields:
            return None
        if isinstance(node, Nested):
            inner = self._single_leaf(node, child)
            if inner is None:
                return None
            return _join(name, inner[0]), inner[1]
        if isinstance(node, OneOf):
            if not node.is_discrete:
                return None
            return name, self._one_of(node, child)
        if isinstance(node, Equals):
            return name, self._equals(node, child)
        return None

    def _one_of(self, node: OneOf, path: str) -> Dict[str, Any]:
        values = node.values
        if isinstance(values, ValueRange):
            self._reject_pattern(values.low, path)
            self._reject_pattern(values.high, path)
            upper = "$lt" if values.exclusive_end else "$lte"
            return {"$gte": values.low, upper: values.high}
        if isinstance(values, range) and len(values) > self.config.max_in_values:
            raise UnsupportedConditionShape(
                path,
                f"range of {len(values)} values exceeds max_in_values={self.config.max_in_values}; "
                "use ValueRange for a continuous interval",
            )
        members: List[Any] = list(values)
        for member in members:
            self._reject_pattern(member, path)
        try:
            members.sort()
        except TypeError:
            pass  # mixed types keep their given order
        return {"$in": members}

    def _equals(self, node: Equals, path: str) -> Any:
        value = node.value
        if isinstance(value, (Mapping, list, tuple, set, frozenset)):
            raise UnsupportedConditionShape(
                path, "equality against a whole document or collection is not supported"
            )
        self._reject_pattern(value, path)
        return value

    @staticmethod
    def _reject_pattern(value: Any, path: str) -> None:
        # the store would run a compiled pattern as a regex match, not an equality test
        if isinstance(value, re.Pattern):
            raise UnsupportedConditionShape(
                path, "pattern values would be matched as regular expressions"
            )

    def _reject_array(self, path: str, what: str) -> None:
        if path in self.config.array_fields:
            raise UnsupportedConditionShape(
                path, f"{what} on an array field would match individual elements"
            )

    @staticmethod
    def _check_name(name: str, prefix: str) -> None:
        if "." in name or name.startswith("$"):
            raise UnsupportedConditionShape(
                _join(prefix, name), "attribute names must not contain '.' or start with '$'"
            )


def compile_condition(
    condition: Optional[ConditionNode], config: Optional[MongoFilterConfig] = None
) -> CompiledFilter:
    """Shortcut for ``MongoFilterCompiler(config).compile(condition)``."""
    if condition is not None and not isinstance(condition, Nested):
        raise TypeError("a rule condition must be a Nested mapping of attributes")
    return MongoFilterCompiler(config).compile(condition)


__all__ = [
    "CompiledFilter",
    "FilterSentinel",
    "MatchAll",
    "MatchNone",
    "MongoFilterCompiler",
    "MongoFilterConfig",
    "compile_condition",
    "filter_kind",
]
