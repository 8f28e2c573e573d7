from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .compiler import CompiledFilter, MatchAll, MatchNone, MongoFilterCompiler, MongoFilterConfig
from .conditions import Nested
from .matcher import matches_any
from .ports import Queryable

logger = logging.getLogger("rulefilter.strategy")


@dataclass(frozen=True)
class ConditionPredicate:
    """In-memory compiled filter: the resolved conditions themselves."""

    conditions: Tuple[Nested, ...]

    def __call__(self, obj: Any) -> bool:
        return matches_any(obj, self.conditions)


def _always(_obj: Any) -> bool:
    return True


def _never(_obj: Any) -> bool:
    return False


class InMemoryStrategy:
    """Evaluate conditions in process; the Queryable receives a predicate."""

    name = "memory"

    def compile(self, conditions: Sequence[Nested]) -> CompiledFilter:
        conds = tuple(conditions)
        if not conds:
            return MatchNone
        if any(not c.items for c in conds):
            return MatchAll
        return ConditionPredicate(conds)

    def native(self, compiled: CompiledFilter) -> Callable[[Any], bool]:
        if compiled is MatchAll:
            return _always
        if compiled is MatchNone:
            return _never
        if not callable(compiled):
            raise TypeError(f"not an in-memory filter: {compiled!r}")
        return compiled

    def apply(self, queryable: Queryable, compiled: CompiledFilter) -> List[Any]:
        return list(queryable.find(self.native(compiled)))

    def contains(self, queryable: Queryable, compiled: CompiledFilter, obj: Any) -> bool:
        predicate = self.native(compiled)
        check = getattr(queryable, "contains", None)
        if check is None:
            return bool(predicate(obj))
        return bool(check(predicate, obj))


class MongoStrategy:
    """Push conditions down to a MongoDB-compatible store as query documents."""

    name = "mongo"

    def __init__(
        self,
        config: Optional[MongoFilterConfig] = None,
        *,
        compiler: Optional[MongoFilterCompiler] = None,
    ) -> None:
        if compiler is not None and config is not None:
            raise TypeError("pass either config or compiler, not both")
        self.compiler = compiler or MongoFilterCompiler(config)

    def compile(self, conditions: Sequence[Nested]) -> CompiledFilter:
        return self.compiler.compile_union(conditions)

    def native(self, compiled: CompiledFilter) -> Any:
        return self.compiler.native(compiled)

    def apply(self, queryable: Queryable, compiled: CompiledFilter) -> List[Any]:
        native = self.native(compiled)
        logger.debug("running filter %r", native)
        return list(queryable.find(native))

    def contains(self, queryable: Queryable, compiled: CompiledFilter, obj: Any) -> bool:
        if compiled is MatchNone:
            return False
        check = getattr(queryable, "contains", None)
        if check is None:
            raise TypeError(
                f"{type(queryable).__name__} cannot check membership; implement contains()"
            )
        return bool(check(self.native(compiled), obj))


STRATEGIES = {
    InMemoryStrategy.name: InMemoryStrategy,
    MongoStrategy.name: MongoStrategy,
}


def make_strategy(name: str, **kwargs: Any):
    """Build a strategy by name (``"memory"`` or ``"mongo"``)."""
    try:
        factory = STRATEGIES[name]
    except KeyError:
        raise ValueError(f"unknown strategy {name!r}; expected one of {sorted(STRATEGIES)}") from None
    return factory(**kwargs)


__all__ = [
    "ConditionPredicate",
    "InMemoryStrategy",
    "MongoStrategy",
    "STRATEGIES",
    "make_strategy",
]
