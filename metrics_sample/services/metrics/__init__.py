"""In-process metrics registry and Prometheus exposition.

This package provides the core infrastructure for registering counters,
gauges and timers, binding them to runtime measurements and rendering a
scrape on demand. All state is in-memory and lives for the process lifetime.
"""

from .errors import ConfigurationError, InvalidArgumentError, MetricsError
from .instruments import Counter, Gauge, Instrument, InstrumentKind, MetricIdentity, Timer
from .registry import MeterRegistry, MetricSample
from .exposition import CONTENT_TYPE, format_labels, format_value, render
from .binders import MeterBinder, bind_runtime_metrics, default_binders

__all__ = [
    "ConfigurationError",
    "InvalidArgumentError",
    "MetricsError",
    "Counter",
    "Gauge",
    "Instrument",
    "InstrumentKind",
    "MetricIdentity",
    "Timer",
    "MeterRegistry",
    "MetricSample",
    "CONTENT_TYPE",
    "format_labels",
    "format_value",
    "render",
    "MeterBinder",
    "bind_runtime_metrics",
    "default_binders",
]
