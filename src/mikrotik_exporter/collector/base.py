"""
Base collector interface.

A collector knows how to read one RouterOS subsystem over an open API
connection and turn what it gets back into metric samples. The
orchestrator only ever talks to this interface, so adding a subsystem
means adding a subclass and a registry entry, nothing else.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from mikrotik_exporter.collector.helpers import description, description_for_property
from mikrotik_exporter.config import Device
from mikrotik_exporter.metrics import COUNTER, GAUGE, MetricDescription, MetricSink

log = logging.getLogger(__name__)


@dataclass
class ScrapeContext:
    """Everything a collector needs for one device during one scrape."""

    sink: MetricSink
    device: Device
    client: object

    def emit(self, description: MetricDescription, value: float,
             label_values: Sequence[str], kind: str = GAUGE):
        return self.sink.emit(description, value, label_values, kind)

    def run(self, command: str, *words: str):
        return self.client.run(command, *words)


class RouterOSCollector(ABC):
    """Interface for all subsystem collectors.

    Subclasses build their descriptions in __init__ and keep them in
    `self.descriptions`; describe() hands out that cached tuple.
    """

    feature = ""
    descriptions: tuple[MetricDescription, ...] = ()

    def describe(self) -> tuple[MetricDescription, ...]:
        """Every description this collector can emit."""
        return self.descriptions

    @abstractmethod
    def collect(self, ctx: ScrapeContext) -> None:
        """Query the device and emit samples into ctx.sink.

        Raises when a request fails; bad values are logged and skipped.
        """
        ...

    def fetch(self, ctx: ScrapeContext, command: str, *words: str):
        """Run a command, logging failures with device context before re-raising."""
        try:
            return ctx.run(command, *words)
        except Exception as e:
            log.error("%s: error fetching %s metrics (%s): %s",
                      ctx.device.name, self.feature, command, e)
            raise

    def parse_and_emit(
        self,
        ctx: ScrapeContext,
        desc: MetricDescription,
        raw: str,
        labels: Sequence[str],
        kind: str = GAUGE,
        convert=float,
    ) -> Optional[float]:
        """Convert one property and emit it.

        Empty values mean the device did not report the property and
        are skipped quietly; values that fail to convert are logged.
        """
        if raw == "":
            return None
        try:
            value = convert(raw)
        except ValueError as e:
            log.warning("%s: skipping %s=%r: %s", ctx.device.name, desc.fq_name, raw, e)
            return None
        ctx.emit(desc, value, labels, kind)
        return value


class PropertyCollector(RouterOSCollector):
    """Collector for the common "print a fixed property list" shape.

    Requests exactly `properties`, then for each returned record turns
    every property that is not an identity field into one sample.
    Identity fields become label values after the device name/address.
    """

    subsystem = ""
    command = ""
    filters: tuple[str, ...] = ()
    properties: tuple[str, ...] = ()
    identity: tuple[str, ...] = ()
    label_names: tuple[str, ...] = ("name", "address")
    counters: frozenset = frozenset()
    help_texts: Mapping[str, str] = {}

    def __init__(self):
        self._metrics = {
            prop: description_for_property(
                self.subsystem, prop, self.label_names, self.help_texts.get(prop)
            )
            for prop in self.properties
            if prop not in self.identity
        }
        self.descriptions = tuple(self._metrics.values())

    def collect(self, ctx: ScrapeContext) -> None:
        reply = self.fetch(ctx, self.command, *self.filters,
                           "=.proplist=" + ",".join(self.properties))
        for record in reply.records:
            labels = self.labels_for(ctx, record)
            for prop, desc in self._metrics.items():
                self.parse_and_emit(
                    ctx, desc, record.get(prop, ""), labels,
                    kind=COUNTER if prop in self.counters else GAUGE,
                    convert=lambda raw, prop=prop: self.convert(prop, raw),
                )

    def labels_for(self, ctx: ScrapeContext, record: Mapping[str, str]) -> tuple[str, ...]:
        return (ctx.device.name, ctx.device.address,
                *(record.get(prop, "") for prop in self.identity))

    def convert(self, prop: str, raw: str) -> float:
        return float(raw)


class MonitorCollector(RouterOSCollector):
    """Collector for subsystems read with `<topic>/monitor =once=`.

    Lists the interfaces first, then monitors all of them in a single
    request. `metrics` maps a monitor property to (metric name, help).
    """

    subsystem = ""
    list_command = ""
    list_filters: tuple[str, ...] = ()
    monitor_command = ""
    metrics: Mapping[str, tuple[str, str]] = {}
    label_names: tuple[str, ...] = ("name", "address", "interface")

    def __init__(self):
        self._metrics = {
            prop: description(self.subsystem, name, help_text, self.label_names)
            for prop, (name, help_text) in self.metrics.items()
        }
        self.descriptions = tuple(self._metrics.values())

    def wants(self, interface: str) -> bool:
        return bool(interface)

    def interfaces(self, ctx: ScrapeContext) -> list[str]:
        reply = self.fetch(ctx, self.list_command, *self.list_filters, "=.proplist=name")
        return [r.get("name", "") for r in reply.records if self.wants(r.get("name", ""))]

    def collect(self, ctx: ScrapeContext) -> None:
        names = self.interfaces(ctx)
        if not names:
            return

        reply = self.fetch(ctx, self.monitor_command, "=numbers=" + ",".join(names), "=once=",
                           "=.proplist=name," + ",".join(self._metrics))
        for record in reply.records:
            labels = (ctx.device.name, ctx.device.address, record.get("name", ""))
            for prop, desc in self._metrics.items():
                self.parse_and_emit(ctx, desc, record.get(prop, ""), labels,
                                    convert=lambda raw, prop=prop: self.convert(prop, raw))

    def convert(self, prop: str, raw: str) -> float:
        return float(raw)
