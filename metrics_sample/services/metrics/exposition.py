"""Prometheus text exposition (version 0.0.4) renderer.

render() is a pure function over a registry snapshot: it groups samples by
metric name in order of first appearance, sorts samples within a name by
their canonical label string and formats every value in fixed decimal.
"""

import math
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence, Tuple

from .instruments import InstrumentKind
from .registry import MetricSample

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Exposition TYPE for each instrument kind
_TYPE_NAMES = {
    InstrumentKind.COUNTER: "counter",
    InstrumentKind.GAUGE: "gauge",
    InstrumentKind.TIMER: "summary",
}


def format_value(value: float) -> str:
    """Format a sample value as a fixed decimal string.

    Whole numbers keep a trailing '.0' to mark the value as floating point,
    and scientific notation is never used:

        5 -> '5.0', 1e-05 -> '0.00001', 1e16 -> '10000000000000000.0'
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    # repr() gives the shortest round-tripping digits; Decimal drops the exponent
    text = format(Decimal(repr(value)), "f")
    if "." not in text:
        text += ".0"
    return text


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def format_labels(labels: Iterable[Tuple[str, str]]) -> str:
    """Format a label set as '{k1="v1",k2="v2"}', or '' when empty."""
    parts = [f'{key}="{_escape_label_value(value)}"' for key, value in labels]
    if not parts:
        return ""
    return "{" + ",".join(parts) + "}"


def _sample_lines(sample: MetricSample) -> List[str]:
    name = sample.identity.name
    labels = format_labels(sample.identity.labels)

    if sample.kind is InstrumentKind.COUNTER or sample.kind is InstrumentKind.GAUGE:
        return [f"{name}{labels} {format_value(sample.value)}"]

    if sample.kind is InstrumentKind.TIMER:
        return [
            f"{name}_count{labels} {format_value(sample.count)}",
            f"{name}_sum{labels} {format_value(sample.total)}",
        ]

    raise TypeError(f"Unknown instrument kind: {sample.kind!r}")


def render(snapshot: Sequence[MetricSample], include_type_comments: bool = False) -> str:
    """Serialize a snapshot to Prometheus text exposition format.

    Args:
        snapshot: Samples as returned by MeterRegistry.snapshot()
        include_type_comments: Emit a '# TYPE <name> <type>' line before
            each metric name group

    Returns:
        Exposition text, newline-terminated, or '' for an empty snapshot
    """
    groups: Dict[str, List[MetricSample]] = {}
    for sample in snapshot:
        groups.setdefault(sample.identity.name, []).append(sample)

    lines: List[str] = []
    for name, samples in groups.items():
        if include_type_comments:
            lines.append(f"# TYPE {name} {_TYPE_NAMES[samples[0].kind]}")
        for sample in sorted(samples, key=lambda s: s.identity.canonical_labels()):
            lines.extend(_sample_lines(sample))

    if not lines:
        return ""
    return "\n".join(lines) + "\n"
