"""Instrument types held by the MeterRegistry.

An instrument is a named, labeled, mutable numeric measurement. The set of
instrument kinds is closed: Counter, Gauge and Timer. Every instrument guards
its own state with a lock so concurrent updates are never lost.
"""

import math
import re
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Mapping, Optional, Tuple, TypeVar, Union

from .errors import InvalidArgumentError

T = TypeVar("T")

_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class InstrumentKind(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMER = "timer"


@dataclass(frozen=True)
class MetricIdentity:
    """Metric name plus its label set in canonical (key-sorted) order.

    Two identities are equal iff their names and label sets match exactly,
    regardless of the order in which labels were supplied.
    """
    name: str
    labels: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def of(cls, name: str, labels: Optional[Mapping[str, Any]] = None) -> "MetricIdentity":
        """Validate and build a canonical identity.

        Args:
            name: Metric name (e.g. 'app_requests_total')
            labels: Label mapping; values are converted with str()

        Raises:
            InvalidArgumentError: If the metric name or a label name is invalid
        """
        if not isinstance(name, str) or not _METRIC_NAME_RE.match(name):
            raise InvalidArgumentError(f"Invalid metric name: {name!r}")

        pairs = []
        for key, value in (labels or {}).items():
            if not isinstance(key, str) or not _LABEL_NAME_RE.match(key) or key.startswith("__"):
                raise InvalidArgumentError(f"Invalid label name {key!r} for metric {name!r}")
            pairs.append((key, str(value)))

        return cls(name=name, labels=tuple(sorted(pairs)))

    def canonical_labels(self) -> str:
        """Label set as 'a="1",b="2"', used for ordering samples within a name."""
        return ",".join(f'{key}="{value}"' for key, value in self.labels)


class Counter:
    """Monotonically non-decreasing float counter."""

    kind = InstrumentKind.COUNTER

    def __init__(self, identity: MetricIdentity):
        self.identity = identity
        self._value = 0.0
        self._lock = threading.Lock()

    def increment(self, delta: float = 1.0) -> None:
        """Add a non-negative delta to the counter.

        Raises:
            InvalidArgumentError: If delta is negative or NaN
        """
        delta = float(delta)
        if math.isnan(delta) or delta < 0:
            raise InvalidArgumentError(
                f"Counter {self.identity.name} can only increase, got delta={delta}"
            )
        with self._lock:
            self._value += delta

    def value(self) -> float:
        with self._lock:
            return self._value


class Gauge:
    """Float value that can go up and down.

    When a sample_fn is supplied it is invoked on every read instead of
    returning the stored value. Exceptions from sample_fn propagate to the
    caller; the registry snapshot is responsible for containing them.
    """

    kind = InstrumentKind.GAUGE

    def __init__(self, identity: MetricIdentity, sample_fn: Optional[Callable[[], float]] = None):
        self.identity = identity
        self._value = 0.0
        self._sample_fn = sample_fn
        self._sampled = sample_fn is not None
        self._lock = threading.Lock()

    @property
    def sampled(self) -> bool:
        return self._sampled

    def set(self, value: float) -> None:
        """Store a value. Sampled gauges are read from sample_fn only.

        Raises:
            InvalidArgumentError: If the gauge has a sample_fn
        """
        if self._sampled:
            raise InvalidArgumentError(
                f"Gauge {self.identity.name} is sampled, set() would never be observed"
            )
        with self._lock:
            self._value = float(value)

    def value(self) -> float:
        with self._lock:
            sample_fn = self._sample_fn
            if not self._sampled:
                return self._value
        if sample_fn is None:
            # Released sampled gauge
            return math.nan
        return float(sample_fn())

    def release(self) -> None:
        """Drop the sampling callback so it no longer references runtime state."""
        with self._lock:
            self._sample_fn = None


class Timer:
    """Accumulates the count and total duration (seconds) of recorded events."""

    kind = InstrumentKind.TIMER

    def __init__(self, identity: MetricIdentity):
        self.identity = identity
        self._count = 0
        self._total = 0.0
        self._lock = threading.Lock()

    def record(self, duration: float) -> None:
        """Record a single event of the given duration in seconds.

        Raises:
            InvalidArgumentError: If duration is negative or NaN
        """
        duration = float(duration)
        if math.isnan(duration) or duration < 0:
            raise InvalidArgumentError(
                f"Timer {self.identity.name} cannot record duration={duration}"
            )
        with self._lock:
            self._count += 1
            self._total += duration

    @contextmanager
    def time(self) -> Iterator[None]:
        """Context manager recording the wall-clock duration of its block.

        Usage example:
        ```python
        with timer.time():
            handle_request()
        ```
        """
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.record(time.perf_counter() - t0)

    def record_callable(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call fn(*args, **kwargs), record its duration and return its result."""
        with self.time():
            return fn(*args, **kwargs)

    def read(self) -> Tuple[int, float]:
        """Atomically read (count, total_seconds)."""
        with self._lock:
            return self._count, self._total

    def count(self) -> int:
        return self.read()[0]

    def total(self) -> float:
        return self.read()[1]


Instrument = Union[Counter, Gauge, Timer]

INSTRUMENT_TYPES = {
    InstrumentKind.COUNTER: Counter,
    InstrumentKind.GAUGE: Gauge,
    InstrumentKind.TIMER: Timer,
}
