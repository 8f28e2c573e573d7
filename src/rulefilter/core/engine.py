from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any, Dict, List, Literal, Optional, Tuple

from ..logging.context import get_current_trace_id
from .compiler import CompiledFilter, MatchAll, filter_kind
from .conditions import Nested
from .errors import UnsupportedConditionShape
from .matcher import matches_any
from .ports import DecisionLogSink, FilterStrategy, MetricsSink, Queryable
from .rules import RuleSet

logger = logging.getLogger("rulefilter.engine")

Combine = Literal["winner", "union"]


def subject_type_of(obj: Any) -> str:
    """Default subject type: the class name of *obj*."""
    if isinstance(obj, Mapping):
        raise TypeError("subject_type is required when checking a mapping")
    return type(obj).__name__


class Authorizer:
    """Answers "can this action be performed on that object?" for a RuleSet.

    Single-object checks and bulk queries both start from the same resolved
    conditions, so :meth:`can` and :meth:`accessible_by` always agree.

    Args:
        rules: the rule set to consult.
        strategy: how bulk queries are executed (in memory or pushed to a store).
        combine: ``"winner"`` uses only the rule chosen by the precedence policy;
            ``"union"`` permits an object when any granting rule does.
        fallback_to_memory: when the strategy cannot express a condition, fetch
            everything and filter in memory instead of raising.
        metrics: optional :class:`MetricsSink`.
        logger_sink: optional :class:`DecisionLogSink` receiving one payload per decision.
    """

    def __init__(
        self,
        rules: RuleSet,
        *,
        strategy: FilterStrategy,
        combine: Combine = "winner",
        fallback_to_memory: bool = False,
        metrics: Optional[MetricsSink] = None,
        logger_sink: Optional[DecisionLogSink] = None,
    ) -> None:
        if combine not in ("winner", "union"):
            raise ValueError(f"combine must be 'winner' or 'union', got {combine!r}")
        self.rules = rules
        self.strategy = strategy
        self.combine = combine
        self.fallback_to_memory = bool(fallback_to_memory)
        self.metrics = metrics
        self.logger_sink = logger_sink

    # ---------------------------------------------------------------- resolve

    def conditions_for(self, action: str, subject_type: str) -> Tuple[Nested, ...]:
        if self.combine == "union":
            return self.rules.relevant_conditions(action, subject_type)
        cond = self.rules.relevant_condition(action, subject_type)
        return () if cond is None else (cond,)

    # ------------------------------------------------------------ single object

    def can(self, action: str, obj: Any, subject_type: Optional[str] = None) -> bool:
        st = subject_type or subject_type_of(obj)
        start = time.perf_counter()
        conditions = self.conditions_for(action, st)
        allowed = matches_any(obj, conditions)
        elapsed = time.perf_counter() - start
        self._record_decision(action, st, allowed, len(conditions), elapsed, via="memory")
        return allowed

    def cannot(self, action: str, obj: Any, subject_type: Optional[str] = None) -> bool:
        return not self.can(action, obj, subject_type)

    def can_in_store(
        self, queryable: Queryable, action: str, obj: Any, subject_type: Optional[str] = None
    ) -> bool:
        """Check *obj* by asking the store whether the compiled filter selects it."""
        st = subject_type or subject_type_of(obj)
        start = time.perf_counter()
        compiled = self.query(action, st)
        allowed = self.strategy.contains(queryable, compiled, obj)
        elapsed = time.perf_counter() - start
        self._record_decision(action, st, allowed, None, elapsed, via=self.strategy.name)
        return allowed

    # ------------------------------------------------------------------- bulk

    def query(self, action: str, subject_type: str) -> CompiledFilter:
        """Compile a fresh filter for *action* on *subject_type*."""
        conditions = self.conditions_for(action, subject_type)
        try:
            compiled = self.strategy.compile(conditions)
        except UnsupportedConditionShape:
            self._inc("rulefilter_filters_total", {"kind": "unsupported"})
            raise
        self._inc("rulefilter_filters_total", {"kind": filter_kind(compiled)})
        return compiled

    def accessible_by(
        self, queryable: Queryable, action: str = "read", *, subject_type: str
    ) -> List[Any]:
        """Fetch the records of *subject_type* on which *action* is permitted."""
        try:
            compiled = self.query(action, subject_type)
        except UnsupportedConditionShape as e:
            if not self.fallback_to_memory:
                raise
            logger.warning(
                "rulefilter: %s; filtering %s in memory (action=%s)", e, subject_type, action
            )
            conditions = self.conditions_for(action, subject_type)
            return [
                obj
                for obj in self.strategy.apply(queryable, MatchAll)
                if matches_any(obj, conditions)
            ]
        return self.strategy.apply(queryable, compiled)

    # --------------------------------------------------------------- internals

    def _record_decision(
        self,
        action: str,
        subject_type: str,
        allowed: bool,
        n_conditions: Optional[int],
        elapsed: float,
        *,
        via: str,
    ) -> None:
        decision = "allow" if allowed else "deny"
        self._inc("rulefilter_decisions_total", {"decision": decision})
        self._observe("rulefilter_decision_seconds", elapsed)
        if self.logger_sink is None:
            return
        payload: Dict[str, Any] = {
            "action": action,
            "subject_type": subject_type,
            "decision": decision,
            "allowed": allowed,
            "conditions": n_conditions,
            "via": via,
            "trace_id": get_current_trace_id(),
        }
        try:
            self.logger_sink.log(payload)
        except Exception:
            # audit sinks must never change the decision
            logger.debug("rulefilter: decision logger failed", exc_info=True)

    def _inc(self, name: str, labels: Dict[str, str]) -> None:
        if self.metrics is None:
            return
        try:
            self.metrics.inc(name, labels)
        except Exception:
            logger.debug("rulefilter: metrics inc failed", exc_info=True)

    def _observe(self, name: str, value: float) -> None:
        observe = getattr(self.metrics, "observe", None)
        if observe is None:
            return
        try:
            observe(name, value)
        except Exception:
            logger.debug("rulefilter: metrics observe failed", exc_info=True)


__all__ = ["Authorizer", "subject_type_of"]
