"""
Core metric definitions for the exporter.

A MetricDescription is the static half of a Prometheus family (name, help,
label names). Collectors build theirs once and push samples into a
MetricSink; the sink is shared by every device task of one scrape and
turns the samples into prometheus_client families at the end.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily

NAMESPACE = "mikrotik"

COUNTER = "counter"
GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDescription:
    """Name, help text and label names of one metric family."""

    subsystem: str
    name: str
    help_text: str
    label_names: tuple[str, ...] = ()
    namespace: str = NAMESPACE

    @property
    def fq_name(self) -> str:
        return "_".join(part for part in (self.namespace, self.subsystem, self.name) if part)


@dataclass(frozen=True)
class MetricSample:
    description: MetricDescription
    value: float
    label_values: tuple[str, ...]
    kind: str = GAUGE


@dataclass
class MetricSink:
    """Collects samples from concurrent device tasks.

    emit() may be called from any thread; families() is meant to run once,
    after every producer has finished.
    """

    _samples: list = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def emit(
        self,
        description: MetricDescription,
        value: float,
        label_values: Sequence[str],
        kind: str = GAUGE,
    ) -> MetricSample:
        labels = tuple(str(v) for v in label_values)
        if len(labels) != len(description.label_names):
            raise ValueError(
                f"{description.fq_name}: got {len(labels)} label values "
                f"for labels {description.label_names}"
            )
        if kind not in (COUNTER, GAUGE):
            raise ValueError(f"unknown metric kind {kind!r}")

        sample = MetricSample(description, float(value), labels, kind)
        with self._lock:
            self._samples.append(sample)
        return sample

    def extend(self, samples: Sequence[MetricSample]) -> None:
        with self._lock:
            self._samples.extend(samples)

    @property
    def samples(self) -> list[MetricSample]:
        with self._lock:
            return list(self._samples)

    def families(self) -> Iterator:
        """Group samples by description, one family per description."""
        grouped: dict[MetricDescription, list[MetricSample]] = {}
        for sample in self.samples:
            grouped.setdefault(sample.description, []).append(sample)

        for description, samples in grouped.items():
            family = new_family(description, samples[0].kind)
            for sample in samples:
                family.add_metric(list(sample.label_values), sample.value)
            yield family


def new_family(description: MetricDescription, kind: str = GAUGE):
    """Build an empty prometheus_client family for a description."""
    family_cls = CounterMetricFamily if kind == COUNTER else GaugeMetricFamily
    return family_cls(
        description.fq_name,
        description.help_text,
        labels=list(description.label_names),
    )
