from __future__ import annotations

from typing import Any, Dict, Optional

from rulefilter.core.ports import MetricsSink

try:
    from prometheus_client import Counter, Histogram  # type: ignore
except Exception:  # pragma: no cover
    Counter = Histogram = None  # type: ignore


class PrometheusMetrics(MetricsSink):
    """Prometheus-based MetricsSink.

    Exposes:
      - rulefilter_decisions_total{decision="allow|deny"}
      - rulefilter_filters_total{kind="match_all|match_none|native|unsupported"}
      - rulefilter_decision_seconds (Histogram)
    """

    _decisions: Optional[Any]
    _filters: Optional[Any]
    _hist: Optional[Any]

    def __init__(self, *, registry: Any | None = None) -> None:
        self._decisions = None
        self._filters = None
        self._hist = None

        if Counter is None or Histogram is None:  # pragma: no cover
            return

        kw: Dict[str, Any] = {} if registry is None else {"registry": registry}
        self._decisions = Counter(
            "rulefilter_decisions_total",
            "Total authorization decisions by outcome.",
            labelnames=("decision",),
            **kw,
        )
        self._filters = Counter(
            "rulefilter_filters_total",
            "Compiled query filters by kind.",
            labelnames=("kind",),
            **kw,
        )
        self._hist = Histogram(
            "rulefilter_decision_seconds",
            "Authorization decision duration in seconds.",
            **kw,
        )

    # -- MetricsSink ------------------------------------------------------------

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        labels = labels or {}
        try:
            if name == "rulefilter_filters_total":
                if self._filters is not None:
                    self._filters.labels(kind=labels.get("kind", "unknown")).inc()
            elif self._decisions is not None:
                self._decisions.labels(decision=labels.get("decision", "unknown")).inc()
        except Exception:  # pragma: no cover
            # never raise from metrics path
            pass

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:  # pragma: no cover
            return
        try:
            self._hist.observe(float(value))
        except Exception:  # pragma: no cover
            pass
