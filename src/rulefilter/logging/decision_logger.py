from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict, Mapping, Optional

from ..core.ports import DecisionLogSink

_DEFAULT_CATEGORY_RATES: Dict[str, float] = {"deny": 1.0}


def _clamp(rate: float) -> float:
    return max(0.0, min(1.0, float(rate)))


class DecisionLogger(DecisionLogSink):
    """Audit sink writing one record per authorization decision.

    Sampling:
      - ``sample_rate`` applies to every decision by default.
      - With ``smart_sampling=True`` each decision category (``allow``/``deny``)
        uses ``category_sampling_rates`` first and falls back to ``sample_rate``.
        By default every ``deny`` is logged.
    """

    def __init__(
        self,
        *,
        sample_rate: float = 1.0,
        level: int = logging.INFO,
        as_json: bool = False,
        logger_name: str = "rulefilter.audit",
        smart_sampling: bool = False,
        category_sampling_rates: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.sample_rate = _clamp(sample_rate)
        self.level = level
        self.as_json = as_json
        self.logger = logging.getLogger(logger_name)
        self.smart_sampling = bool(smart_sampling)
        rates = dict(_DEFAULT_CATEGORY_RATES)
        if category_sampling_rates is not None:
            rates = {k: _clamp(v) for k, v in category_sampling_rates.items()}
        self.category_sampling_rates = rates

    def _effective_rate(self, payload: Mapping[str, Any]) -> float:
        if not self.smart_sampling:
            return self.sample_rate
        category = str(payload.get("decision", ""))
        return self.category_sampling_rates.get(category, self.sample_rate)

    def _sampled(self, rate: float) -> bool:
        if rate >= 1.0:
            return True
        if rate <= 0.0:
            return False
        return random.random() < rate

    def log(self, payload: Dict[str, Any]) -> None:
        if not self._sampled(self._effective_rate(payload)):
            return
        if self.as_json:
            try:
                msg = json.dumps(payload, sort_keys=True, default=str)
            except (TypeError, ValueError):
                msg = f"decision {payload!r}"
        else:
            msg = "decision " + " ".join(f"{k}={payload[k]!r}" for k in sorted(payload))
        self.logger.log(self.level, msg)


__all__ = ["DecisionLogger"]
