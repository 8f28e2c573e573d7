from .context import (
    TraceIdFilter,
    clear_current_trace_id,
    gen_trace_id,
    get_current_trace_id,
    set_current_trace_id,
)
from .decision_logger import DecisionLogger

__all__ = [
    "DecisionLogger",
    "TraceIdFilter",
    "clear_current_trace_id",
    "gen_trace_id",
    "get_current_trace_id",
    "set_current_trace_id",
]
