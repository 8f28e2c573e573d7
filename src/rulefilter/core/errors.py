from __future__ import annotations


class RuleFilterError(Exception):
    """Base class for rulefilter errors."""


class ConditionError(RuleFilterError, ValueError):
    """Raised when a condition description cannot be parsed into a tree."""


class UnsupportedConditionShape(RuleFilterError):
    """A condition cannot be expressed losslessly as a native store filter.

    Callers may catch this and fall back to fetching everything and filtering
    in memory with :func:`rulefilter.core.matcher.matches`.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot compile condition at {path!r}: {reason}")
        self.path = path
        self.reason = reason


__all__ = ["RuleFilterError", "ConditionError", "UnsupportedConditionShape"]
