from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple

from .conditions import Nested, parse_condition

logger = logging.getLogger("rulefilter.rules")

# Wildcards understood by rule relevance.
MANAGE = "manage"  # any action
ALL = "all"  # any subject type


@dataclass(frozen=True)
class Rule:
    """A single permission declaration.

    ``condition`` may be given as a plain mapping; it is parsed into a
    :class:`~rulefilter.core.conditions.Nested` tree on construction.
    """

    action: str
    subject_type: str
    condition: Nested = field(default_factory=Nested)
    grants: bool = True
    rule_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.condition, Nested):
            object.__setattr__(self, "condition", parse_condition(self.condition))

    def relevant(self, action: str, subject_type: str) -> bool:
        return self.action in (action, MANAGE) and self.subject_type in (subject_type, ALL)

    @property
    def specificity(self) -> int:
        """2 points for an exact subject type, 1 for an exact action."""
        return (2 if self.subject_type != ALL else 0) + (1 if self.action != MANAGE else 0)


# A precedence policy orders the relevant rules, winner first.
Precedence = Callable[[Sequence[Rule]], Sequence[Rule]]


def last_defined_wins(rules: Sequence[Rule]) -> Sequence[Rule]:
    return tuple(reversed(rules))


def first_defined_wins(rules: Sequence[Rule]) -> Sequence[Rule]:
    return tuple(rules)


def most_specific_wins(rules: Sequence[Rule]) -> Sequence[Rule]:
    """Exact subject types beat ``all``, exact actions beat ``manage``; ties go to the later rule."""
    indexed = list(enumerate(rules))
    indexed.sort(key=lambda pair: (pair[1].specificity, pair[0]), reverse=True)
    return tuple(rule for _, rule in indexed)


PRECEDENCE_POLICIES: Mapping[str, Precedence] = {
    "last-defined-wins": last_defined_wins,
    "first-defined-wins": first_defined_wins,
    "most-specific-wins": most_specific_wins,
}


def _resolve_precedence(precedence: Precedence | str) -> Precedence:
    if isinstance(precedence, str):
        try:
            return PRECEDENCE_POLICIES[precedence]
        except KeyError:
            raise ValueError(
                f"unknown precedence policy {precedence!r}; "
                f"expected one of {sorted(PRECEDENCE_POLICIES)}"
            ) from None
    if not callable(precedence):
        raise TypeError("precedence must be a callable or a policy name")
    return precedence


class RuleSet:
    """Ordered, immutable collection of rules with an injected precedence policy.

    The same resolved condition feeds both single-object checks and filter
    compilation, so the two always agree.
    """

    __slots__ = ("_rules", "_precedence")

    def __init__(self, rules: Iterable[Rule | Mapping[str, Any]] = (), *, precedence: Precedence | str) -> None:
        built = []
        for r in rules:
            built.append(r if isinstance(r, Rule) else Rule(**r))
        self._rules: Tuple[Rule, ...] = tuple(built)
        self._precedence = _resolve_precedence(precedence)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    @property
    def precedence(self) -> Precedence:
        return self._precedence

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def add(self, rule: Rule) -> "RuleSet":
        """Return a new RuleSet with *rule* appended."""
        return RuleSet(self._rules + (rule,), precedence=self._precedence)

    def relevant_rules(self, action: str, subject_type: str) -> Tuple[Rule, ...]:
        candidates = [r for r in self._rules if r.relevant(action, subject_type)]
        if not candidates:
            return ()
        return tuple(self._precedence(candidates))

    def relevant_condition(self, action: str, subject_type: str) -> Optional[Nested]:
        """Condition of the winning rule, or None when nothing is permitted."""
        ordered = self.relevant_rules(action, subject_type)
        if not ordered:
            logger.debug("no rule for %s on %s", action, subject_type)
            return None
        winner = ordered[0]
        if not winner.grants:
            # a deny cannot be negated inside a filter, so it denies everything
            logger.debug(
                "deny rule %s wins for %s on %s", winner.rule_id or "<anonymous>", action, subject_type
            )
            return None
        return winner.condition

    def relevant_conditions(self, action: str, subject_type: str) -> Tuple[Nested, ...]:
        """Granting conditions in precedence order, cut at the first deny rule."""
        out = []
        for rule in self.relevant_rules(action, subject_type):
            if not rule.grants:
                break
            out.append(rule.condition)
        return tuple(out)


__all__ = [
    "ALL",
    "MANAGE",
    "PRECEDENCE_POLICIES",
    "Precedence",
    "Rule",
    "RuleSet",
    "first_defined_wins",
    "last_defined_wins",
    "most_specific_wins",
]
