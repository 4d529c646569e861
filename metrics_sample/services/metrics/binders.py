"""Runtime and host binders for the MeterRegistry.

Each binder registers a related set of sampled gauges whose callbacks query
the Python runtime (sys, gc, threading) or the host via psutil at scrape
time. Binders hold no state beyond a psutil.Process handle.
"""

import gc
import os
import sys
import threading
import time
from typing import List, Optional, Protocol, Sequence

import psutil

from metrics_sample.core.logging_config import get_logger
from .registry import MeterRegistry

logger = get_logger(__name__)


class MeterBinder(Protocol):
    """Protocol for objects that register a group of instruments on a registry."""

    def bind_to(self, registry: MeterRegistry) -> None:
        ...


class ModuleMetrics:
    """Number of modules currently loaded by the interpreter."""

    def bind_to(self, registry: MeterRegistry) -> None:
        registry.register_gauge("python_modules_loaded", sample_fn=lambda: len(sys.modules))


class MemoryMetrics:
    """Process resident/virtual memory and system memory usage in bytes."""

    def __init__(self, process: Optional[psutil.Process] = None):
        self.process = process or psutil.Process()

    def bind_to(self, registry: MeterRegistry) -> None:
        process = self.process
        registry.register_gauge(
            "process_resident_memory_bytes", sample_fn=lambda: process.memory_info().rss
        )
        registry.register_gauge(
            "process_virtual_memory_bytes", sample_fn=lambda: process.memory_info().vms
        )
        registry.register_gauge(
            "system_memory_used_bytes", sample_fn=lambda: psutil.virtual_memory().used
        )
        registry.register_gauge(
            "system_memory_total_bytes", sample_fn=lambda: psutil.virtual_memory().total
        )


class GcMetrics:
    """Per-generation garbage collector statistics."""

    def bind_to(self, registry: MeterRegistry) -> None:
        for generation in range(len(gc.get_stats())):
            labels = {"generation": str(generation)}
            registry.register_gauge(
                "python_gc_collections", labels,
                sample_fn=lambda g=generation: gc.get_stats()[g]["collections"],
            )
            registry.register_gauge(
                "python_gc_objects_collected", labels,
                sample_fn=lambda g=generation: gc.get_stats()[g]["collected"],
            )
            registry.register_gauge(
                "python_gc_objects_uncollectable", labels,
                sample_fn=lambda g=generation: gc.get_stats()[g]["uncollectable"],
            )
        registry.register_gauge("python_gc_objects_tracked", sample_fn=lambda: len(gc.get_objects()))


class ThreadMetrics:
    """Live and daemon thread counts."""

    def bind_to(self, registry: MeterRegistry) -> None:
        registry.register_gauge("python_threads_live", sample_fn=threading.active_count)
        registry.register_gauge(
            "python_threads_daemon",
            sample_fn=lambda: sum(1 for t in threading.enumerate() if t.daemon),
        )


class ProcessorMetrics:
    """CPU count, system/process CPU usage (0..1) and 1-minute load average."""

    def __init__(self, process: Optional[psutil.Process] = None):
        self.process = process or psutil.Process()

    def bind_to(self, registry: MeterRegistry) -> None:
        process = self.process

        # First call primes psutil's interval counters, it always returns 0.0
        psutil.cpu_percent(interval=None)
        process.cpu_percent(interval=None)

        registry.register_gauge("system_cpu_count", sample_fn=lambda: psutil.cpu_count() or 0)
        registry.register_gauge(
            "system_cpu_usage", sample_fn=lambda: psutil.cpu_percent(interval=None) / 100.0
        )
        registry.register_gauge(
            "process_cpu_usage", sample_fn=lambda: process.cpu_percent(interval=None) / 100.0
        )
        if hasattr(os, "getloadavg"):
            registry.register_gauge("system_load_average_1m", sample_fn=lambda: os.getloadavg()[0])


class UptimeMetrics:
    """Process start time (unix seconds) and uptime in seconds."""

    def __init__(self, process: Optional[psutil.Process] = None):
        self.process = process or psutil.Process()

    def bind_to(self, registry: MeterRegistry) -> None:
        start_time = self.process.create_time()
        registry.register_gauge("process_start_time_seconds", sample_fn=lambda: start_time)
        registry.register_gauge("process_uptime_seconds", sample_fn=lambda: time.time() - start_time)


def default_binders() -> List[MeterBinder]:
    """All runtime binders, sharing a single psutil.Process handle."""
    process = psutil.Process()
    return [
        ModuleMetrics(),
        MemoryMetrics(process),
        GcMetrics(),
        ThreadMetrics(),
        ProcessorMetrics(process),
        UptimeMetrics(process),
    ]


def bind_runtime_metrics(registry: MeterRegistry, binders: Optional[Sequence[MeterBinder]] = None) -> None:
    """Bind each binder to the registry.

    Args:
        registry: MeterRegistry to register gauges on
        binders: Binders to apply; defaults to default_binders()
    """
    if binders is None:
        binders = default_binders()

    before = len(registry)
    for binder in binders:
        binder.bind_to(registry)

    logger.info(f"Bound {len(binders)} runtime binders ({len(registry) - before} gauges)")
