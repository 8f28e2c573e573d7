from __future__ import annotations

from typing import Any, Dict, Optional

from rulefilter.core.ports import MetricsSink

try:
    from opentelemetry.metrics import get_meter  # type: ignore
except Exception:  # pragma: no cover
    get_meter = None  # type: ignore


class OpenTelemetryMetrics(MetricsSink):
    """OpenTelemetry-based MetricsSink.

    Creates:
      - Counter: rulefilter_decisions_total (attributes: decision)
      - Counter: rulefilter_filters_total (attributes: kind)
      - Histogram: rulefilter_decision_seconds (unit: s)
    """

    _counters: Dict[str, Any]
    _hist: Optional[Any]

    def __init__(self) -> None:
        self._counters = {}
        self._hist = None

        if get_meter is None:  # pragma: no cover
            return

        meter = get_meter("rulefilter.metrics")
        for name, description in (
            ("rulefilter_decisions_total", "Total authorization decisions by outcome."),
            ("rulefilter_filters_total", "Compiled query filters by kind."),
        ):
            try:
                self._counters[name] = meter.create_counter(name=name, description=description)
            except Exception:  # pragma: no cover
                pass

        try:
            create_hist = getattr(meter, "create_histogram", None)
            if create_hist is not None:
                self._hist = create_hist(
                    name="rulefilter_decision_seconds",
                    description="Authorization decision duration in seconds.",
                    unit="s",
                )
        except Exception:  # pragma: no cover
            self._hist = None

    # -- MetricsSink ------------------------------------------------------------

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        counter = self._counters.get(name)
        if counter is None:
            return
        try:
            counter.add(1, dict(labels or {}))
        except Exception:  # pragma: no cover
            pass

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:
            return
        try:
            self._hist.record(float(value), dict(labels or {}))
        except Exception:  # pragma: no cover
            pass
