"""
Tests for the runtime/host binders that register sampled gauges.
"""

import math
import os

from metrics_sample.services.metrics import InstrumentKind, MeterRegistry, bind_runtime_metrics, render
from metrics_sample.services.metrics.binders import (
    GcMetrics,
    MemoryMetrics,
    ModuleMetrics,
    ProcessorMetrics,
    ThreadMetrics,
    UptimeMetrics,
    default_binders,
)


def _values(registry):
    return {
        (s.identity.name, s.identity.labels): s.value
        for s in registry.snapshot()
    }


def test_default_binders_register_finite_gauges(registry):
    bind_runtime_metrics(registry)

    samples = registry.snapshot()
    names = {s.identity.name for s in samples}

    expected = {
        "python_modules_loaded",
        "process_resident_memory_bytes",
        "process_virtual_memory_bytes",
        "system_memory_used_bytes",
        "system_memory_total_bytes",
        "python_gc_collections",
        "python_gc_objects_collected",
        "python_gc_objects_uncollectable",
        "python_gc_objects_tracked",
        "python_threads_live",
        "python_threads_daemon",
        "system_cpu_count",
        "system_cpu_usage",
        "process_cpu_usage",
        "process_start_time_seconds",
        "process_uptime_seconds",
    }
    assert expected <= names
    assert all(s.kind is InstrumentKind.GAUGE for s in samples)
    assert all(math.isfinite(s.value) for s in samples)


def test_binding_twice_is_idempotent(registry):
    bind_runtime_metrics(registry)
    count = len(registry)

    bind_runtime_metrics(registry)

    assert len(registry) == count


def test_module_and_thread_metrics_are_live(registry):
    ModuleMetrics().bind_to(registry)
    ThreadMetrics().bind_to(registry)

    values = _values(registry)
    assert values[("python_modules_loaded", ())] > 0
    assert values[("python_threads_live", ())] >= 1


def test_gc_metrics_labelled_by_generation(registry):
    GcMetrics().bind_to(registry)

    values = _values(registry)
    assert ("python_gc_collections", (("generation", "0"),)) in values
    assert 'python_gc_collections{generation="0"}' in render(registry.snapshot())


def test_memory_and_processor_metrics(registry):
    MemoryMetrics().bind_to(registry)
    ProcessorMetrics().bind_to(registry)

    values = _values(registry)
    assert values[("process_resident_memory_bytes", ())] > 0
    assert values[("system_memory_total_bytes", ())] >= values[("system_memory_used_bytes", ())]
    assert values[("system_cpu_count", ())] >= 1
    assert 0.0 <= values[("system_cpu_usage", ())] <= 1.0
    if hasattr(os, "getloadavg"):
        assert values[("system_load_average_1m", ())] >= 0.0


def test_uptime_metrics(registry):
    UptimeMetrics().bind_to(registry)

    values = _values(registry)
    assert values[("process_start_time_seconds", ())] > 0
    assert values[("process_uptime_seconds", ())] >= 0


def test_closed_registry_releases_binder_gauges():
    registry = MeterRegistry()
    bind_runtime_metrics(registry, default_binders())
    registry.close()

    assert all(math.isnan(s.value) for s in registry.snapshot())
