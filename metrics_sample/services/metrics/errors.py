"""Exceptions raised by the metrics registry."""


class MetricsError(Exception):
    """Base class for all metrics errors."""


class ConfigurationError(MetricsError):
    """Raised when a registration conflicts with the registry's current state.

    Covers instrument-kind collisions for a metric name and registrations
    attempted after the registry has been closed.
    """


class InvalidArgumentError(MetricsError, ValueError):
    """Raised for invalid metric names, label names or instrument arguments."""
