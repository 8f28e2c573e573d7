from .compiler import (
    CompiledFilter,
    MatchAll,
    MatchNone,
    MongoFilterCompiler,
    MongoFilterConfig,
    compile_condition,
    filter_kind,
)
from .conditions import EMPTY, Equals, Nested, OneOf, ValueRange, parse_condition
from .engine import Authorizer
from .errors import ConditionError, RuleFilterError, UnsupportedConditionShape
from .matcher import matches, matches_any
from .rules import (
    ALL,
    MANAGE,
    Rule,
    RuleSet,
    first_defined_wins,
    last_defined_wins,
    most_specific_wins,
)
from .strategy import InMemoryStrategy, MongoStrategy, make_strategy

__all__ = [
    "ALL",
    "Authorizer",
    "CompiledFilter",
    "ConditionError",
    "EMPTY",
    "Equals",
    "InMemoryStrategy",
    "MANAGE",
    "MatchAll",
    "MatchNone",
    "MongoFilterCompiler",
    "MongoFilterConfig",
    "MongoStrategy",
    "Nested",
    "OneOf",
    "Rule",
    "RuleFilterError",
    "RuleSet",
    "UnsupportedConditionShape",
    "ValueRange",
    "compile_condition",
    "filter_kind",
    "first_defined_wins",
    "last_defined_wins",
    "make_strategy",
    "matches",
    "matches_any",
    "most_specific_wins",
    "parse_condition",
]
