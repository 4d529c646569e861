"""MeterRegistry - In-memory, thread-safe store for all metric instruments.

The registry maps a MetricIdentity (name + canonical label set) to exactly one
instrument. Registration is idempotent lookup-or-create; the first creation
for an identity wins under a race. Snapshots read each instrument atomically
without holding the registry lock while sampling.
"""

import math
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from metrics_sample.core.logging_config import get_logger
from .errors import ConfigurationError
from .instruments import (
    INSTRUMENT_TYPES,
    Counter,
    Gauge,
    Instrument,
    InstrumentKind,
    MetricIdentity,
    Timer,
)

logger = get_logger(__name__)

Labels = Optional[Mapping[str, Any]]

# Series suffixes rendered for every timer
TIMER_SUFFIXES = ("_count", "_sum")


@dataclass(frozen=True)
class MetricSample:
    """Resolved value(s) of one instrument at snapshot time.

    Counters and gauges populate `value`; timers populate `count` and `total`.
    """
    identity: MetricIdentity
    kind: InstrumentKind
    value: float = 0.0
    count: int = 0
    total: float = 0.0


class MeterRegistry:
    """Process-wide metric store, created explicitly at process entry.

    Usage example:
    ```python
    with MeterRegistry() as registry:
        registry.register_counter("app_requests_total", {"endpoint": "health"}).increment()
        text = render(registry.snapshot())
    ```
    """

    def __init__(self):
        # Instruments keyed by identity, in registration order
        self._instruments: Dict[MetricIdentity, Instrument] = {}

        # Kind of every registered metric name
        self._kinds: Dict[str, InstrumentKind] = {}

        self._lock = threading.Lock()
        self._closed = False

    def register_counter(self, name: str, labels: Labels = None) -> Counter:
        """Return the counter for (name, labels), creating it on first use.

        Raises:
            ConfigurationError: If name is registered under another kind
            InvalidArgumentError: If name or a label name is invalid
        """
        return self._lookup_or_create(MetricIdentity.of(name, labels), InstrumentKind.COUNTER)

    def register_gauge(
        self,
        name: str,
        labels: Labels = None,
        sample_fn: Optional[Callable[[], float]] = None,
    ) -> Gauge:
        """Return the gauge for (name, labels), creating it on first use.

        Args:
            name: Metric name
            labels: Label mapping
            sample_fn: Callback invoked on every snapshot instead of the stored
                value. Ignored when the gauge already exists.

        Raises:
            ConfigurationError: If name is registered under another kind
            InvalidArgumentError: If name or a label name is invalid
        """
        return self._lookup_or_create(
            MetricIdentity.of(name, labels), InstrumentKind.GAUGE, sample_fn=sample_fn
        )

    def register_timer(self, name: str, labels: Labels = None) -> Timer:
        """Return the timer for (name, labels), creating it on first use.

        Raises:
            ConfigurationError: If name is registered under another kind
            InvalidArgumentError: If name or a label name is invalid
        """
        return self._lookup_or_create(MetricIdentity.of(name, labels), InstrumentKind.TIMER)

    def _lookup_or_create(self, identity: MetricIdentity, kind: InstrumentKind, **kwargs) -> Any:
        existing = self._instruments.get(identity)
        if existing is not None and not self._closed:
            self._check_kind(identity.name, existing.kind, kind)
            return existing

        with self._lock:
            if self._closed:
                raise ConfigurationError(
                    f"Cannot register {kind.value} {identity.name}: registry is closed"
                )

            registered_kind = self._kinds.get(identity.name)
            if registered_kind is not None:
                self._check_kind(identity.name, registered_kind, kind)
            else:
                self._check_timer_suffixes(identity.name, kind)

            existing = self._instruments.get(identity)
            if existing is not None:
                return existing

            instrument = INSTRUMENT_TYPES[kind](identity, **kwargs)
            self._instruments[identity] = instrument
            self._kinds.setdefault(identity.name, kind)

        logger.debug(f"Registered {kind.value} {identity.name}{{{identity.canonical_labels()}}}")
        return instrument

    def _check_timer_suffixes(self, name: str, kind: InstrumentKind) -> None:
        """Reject names whose series would clash with a timer's _count/_sum lines."""
        if kind is InstrumentKind.TIMER:
            for suffix in TIMER_SUFFIXES:
                other = self._kinds.get(name + suffix)
                if other is not None and other is not InstrumentKind.TIMER:
                    raise ConfigurationError(
                        f"Cannot register timer {name}: {other.value} {name}{suffix} "
                        f"would duplicate its {suffix} series"
                    )
            return

        for suffix in TIMER_SUFFIXES:
            if name.endswith(suffix) and self._kinds.get(name[: -len(suffix)]) is InstrumentKind.TIMER:
                raise ConfigurationError(
                    f"Cannot register {kind.value} {name}: it duplicates a series "
                    f"of timer {name[: -len(suffix)]}"
                )

    @staticmethod
    def _check_kind(name: str, registered: InstrumentKind, requested: InstrumentKind) -> None:
        if registered is not requested:
            raise ConfigurationError(
                f"Metric {name} is already registered as a {registered.value}, "
                f"cannot register it as a {requested.value}"
            )

    def snapshot(self) -> List[MetricSample]:
        """Read every instrument's current value(s) in registration order.

        Each instrument is read atomically; there is no cross-instrument
        consistency. A gauge whose sample_fn raises is reported as NaN.
        """
        with self._lock:
            instruments = list(self._instruments.values())

        samples: List[MetricSample] = []
        for instrument in instruments:
            samples.append(self._read(instrument))
        return samples

    def _read(self, instrument: Instrument) -> MetricSample:
        identity = instrument.identity

        if isinstance(instrument, Counter):
            return MetricSample(identity, InstrumentKind.COUNTER, value=instrument.value())

        if isinstance(instrument, Gauge):
            try:
                value = instrument.value()
            except Exception as e:
                logger.warning(f"Gauge {identity.name}{{{identity.canonical_labels()}}} sampling failed: {e}")
                value = math.nan
            return MetricSample(identity, InstrumentKind.GAUGE, value=value)

        if isinstance(instrument, Timer):
            count, total = instrument.read()
            return MetricSample(identity, InstrumentKind.TIMER, count=count, total=total)

        raise TypeError(f"Unknown instrument type: {type(instrument).__name__}")

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release sampling callbacks and reject further registrations.

        Safe to call more than once.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            instruments = list(self._instruments.values())

        released = 0
        for instrument in instruments:
            if isinstance(instrument, Gauge) and instrument.sampled:
                instrument.release()
                released += 1

        logger.info(f"Metrics registry closed ({len(instruments)} instruments, {released} sampled gauges released)")

    def __len__(self) -> int:
        return len(self._instruments)

    def __enter__(self) -> "MeterRegistry":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
