"""
Unit tests for the Prometheus text exposition renderer.
"""

import math

import pytest

from metrics_sample.services.metrics import (
    InstrumentKind,
    MeterRegistry,
    MetricIdentity,
    MetricSample,
    format_labels,
    format_value,
    render,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, "5.0"),
        (0, "0.0"),
        (-2, "-2.0"),
        (0.5, "0.5"),
        (1234.5678, "1234.5678"),
        (1e-05, "0.00001"),
        (1e16, "10000000000000000.0"),
        (float("nan"), "NaN"),
        (float("inf"), "+Inf"),
        (float("-inf"), "-Inf"),
    ],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_format_labels_escapes_values():
    labels = (("msg", 'say "hi"\nback\\slash'),)
    assert format_labels(labels) == '{msg="say \\"hi\\"\\nback\\\\slash"}'
    assert format_labels(()) == ""


def test_end_to_end_single_counter():
    """Empty registry -> one counter incremented once -> exact exposition."""
    with MeterRegistry() as registry:
        registry.register_counter("app_requests_total", {"endpoint": "health"}).increment()

        assert render(registry.snapshot()) == 'app_requests_total{endpoint="health"} 1.0\n'


def test_counter_and_sampled_gauge_lines():
    with MeterRegistry() as registry:
        registry.register_counter("requests_total", {"endpoint": "health"}).increment(5)
        registry.register_gauge("uptime_seconds", sample_fn=lambda: 42)

        lines = render(registry.snapshot()).splitlines()

    assert 'requests_total{endpoint="health"} 5.0' in lines
    assert "uptime_seconds 42.0" in lines


def test_timer_emits_count_and_sum():
    with MeterRegistry() as registry:
        timer = registry.register_timer("app_response_time_seconds", {"endpoint": "health"})
        timer.record(0.25)
        timer.record(0.5)

        assert render(registry.snapshot()) == (
            'app_response_time_seconds_count{endpoint="health"} 2.0\n'
            'app_response_time_seconds_sum{endpoint="health"} 0.75\n'
        )


def test_groups_by_name_in_registration_order_and_sorts_labels():
    with MeterRegistry() as registry:
        registry.register_counter("zeta_total", {"path": "b"}).increment()
        registry.register_gauge("alpha").set(1)
        registry.register_counter("zeta_total", {"path": "a"}).increment(2)

        output = render(registry.snapshot())

    assert output == (
        'zeta_total{path="a"} 2.0\n'
        'zeta_total{path="b"} 1.0\n'
        "alpha 1.0\n"
    )


def test_type_comments():
    with MeterRegistry() as registry:
        registry.register_counter("c_total").increment()
        registry.register_gauge("g").set(3)
        registry.register_timer("t_seconds")

        output = render(registry.snapshot(), include_type_comments=True)

    assert output == (
        "# TYPE c_total counter\n"
        "c_total 1.0\n"
        "# TYPE g gauge\n"
        "g 3.0\n"
        "# TYPE t_seconds summary\n"
        "t_seconds_count 0.0\n"
        "t_seconds_sum 0.0\n"
    )


def test_failing_gauge_renders_nan():
    def broken():
        raise OSError("gone")

    with MeterRegistry() as registry:
        registry.register_gauge("flaky", sample_fn=broken)
        assert render(registry.snapshot()) == "flaky NaN\n"


def test_render_is_pure_over_snapshot():
    """Rendering the same snapshot twice gives identical output, later mutation is not seen."""
    with MeterRegistry() as registry:
        counter = registry.register_counter("c_total")
        counter.increment()
        snapshot = registry.snapshot()
        counter.increment()

        assert render(snapshot) == render(snapshot) == "c_total 1.0\n"


def test_render_empty_snapshot():
    assert render([]) == ""


def test_render_rejects_unknown_kind():
    sample = MetricSample(MetricIdentity.of("x"), kind="histogram")
    with pytest.raises(TypeError):
        render([sample])


def test_render_from_hand_built_snapshot():
    samples = [
        MetricSample(MetricIdentity.of("g", {"k": "v"}), InstrumentKind.GAUGE, value=math.nan),
        MetricSample(MetricIdentity.of("t"), InstrumentKind.TIMER, count=3, total=1.5),
    ]
    assert render(samples) == 'g{k="v"} NaN\nt_count 3.0\nt_sum 1.5\n'
