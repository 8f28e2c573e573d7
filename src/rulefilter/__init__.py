from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version
except Exception:  # pragma: no cover
    PackageNotFoundError = Exception  # type: ignore[assignment,misc]
    version = None  # type: ignore[assignment]

from . import core, storage
from .core.compiler import MatchAll, MatchNone, MongoFilterCompiler, MongoFilterConfig
from .core.conditions import Equals, Nested, OneOf, ValueRange, parse_condition
from .core.engine import Authorizer
from .core.errors import ConditionError, RuleFilterError, UnsupportedConditionShape
from .core.matcher import matches, matches_any
from .core.rules import Rule, RuleSet
from .core.strategy import InMemoryStrategy, MongoStrategy
from .storage import InMemoryQueryable, MongoQueryable


def _detect_version() -> str:
    if version is None:
        return "0.1.0"
    try:
        return version("rulefilter")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "Authorizer",
    "ConditionError",
    "Equals",
    "InMemoryQueryable",
    "InMemoryStrategy",
    "MatchAll",
    "MatchNone",
    "MongoFilterCompiler",
    "MongoFilterConfig",
    "MongoQueryable",
    "MongoStrategy",
    "Nested",
    "OneOf",
    "Rule",
    "RuleFilterError",
    "RuleSet",
    "UnsupportedConditionShape",
    "ValueRange",
    "core",
    "matches",
    "matches_any",
    "parse_condition",
    "storage",
    "__version__",
]
