from __future__ import annotations

from typing import Any, Dict, Iterable, List, Protocol, Sequence, runtime_checkable

from .conditions import Nested


@runtime_checkable
class Queryable(Protocol):
    """Anything that can fetch the records matching a native filter."""

    def find(self, native_filter: Any) -> Iterable[Any]: ...


@runtime_checkable
class FilterStrategy(Protocol):
    """Turns resolved conditions into a filter and runs it against a Queryable."""

    name: str

    def compile(self, conditions: Sequence[Nested]) -> Any: ...

    def native(self, compiled: Any) -> Any: ...

    def apply(self, queryable: Queryable, compiled: Any) -> List[Any]: ...

    def contains(self, queryable: Queryable, compiled: Any, obj: Any) -> bool: ...


class MetricsSink(Protocol):
    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None: ...


class DecisionLogSink(Protocol):
    def log(self, payload: Dict[str, Any]) -> None: ...


__all__ = ["DecisionLogSink", "FilterStrategy", "MetricsSink", "Queryable"]
