"""
Scrape orchestration.

MikrotikCollector is a prometheus_client custom collector. Every
collect() call scrapes all devices concurrently, one thread per device,
and waits for all of them before handing the families to the registry.
A device that fails only affects its own success metric.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from prometheus_client import CollectorRegistry, Info

from mikrotik_exporter import __version__
from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description
from mikrotik_exporter.collector.registry import build_collectors
from mikrotik_exporter.config import Config, Device
from mikrotik_exporter.discovery import resolve_devices
from mikrotik_exporter.metrics import MetricSink, new_family
from mikrotik_exporter.routeros import DEFAULT_TIMEOUT, connect

log = logging.getLogger(__name__)

SCRAPE_DURATION = description(
    "scrape", "collector_duration_seconds",
    "mikrotik_exporter: duration of a device collector scrape", ("device",),
)
SCRAPE_SUCCESS = description(
    "scrape", "collector_success",
    "mikrotik_exporter: whether a device collector succeeded", ("device",),
)

Connector = Callable[..., object]


class MikrotikCollector:
    """Scrapes every configured device on each collect().

    One worker thread per device unless max_workers caps the pool.
    """

    def __init__(
        self,
        config: Config,
        collectors: Optional[Sequence[RouterOSCollector]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        tls: bool = False,
        insecure: bool = False,
        connector: Connector = connect,
        max_workers: Optional[int] = None,
    ):
        self._config = config
        self._collectors = list(collectors) if collectors is not None else build_collectors(config.features)
        self._timeout = timeout
        self._tls = tls
        self._insecure = insecure
        self._connector = connector
        self._max_workers = max_workers

    @property
    def collectors(self) -> list[RouterOSCollector]:
        return list(self._collectors)

    def describe(self):
        yield new_family(SCRAPE_DURATION)
        yield new_family(SCRAPE_SUCCESS)
        for collector in self._collectors:
            for desc in collector.describe():
                yield new_family(desc)

    def collect(self):
        sink = MetricSink()
        devices = self.devices()
        if devices:
            workers = len(devices) if not self._max_workers else min(len(devices), self._max_workers)
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scrape") as pool:
                futures = [pool.submit(self.collect_for_device, device, sink) for device in devices]
                for future in futures:
                    future.result()
        yield from sink.families()

    def devices(self) -> list[Device]:
        """Configured devices with SRV entries expanded."""
        return resolve_devices(self._config.devices, identify=self._identify)

    def collect_for_device(self, device: Device, sink: MetricSink) -> bool:
        """Scrape one device and record its duration and success.

        Samples are staged per device and only published when every
        collector succeeded.
        """
        staged = MetricSink()
        begin = time.monotonic()
        try:
            self.connect_and_collect(device, staged)
            success = True
        except Exception as e:
            log.error("%s: collector failed after %.3fs: %s",
                      device.name, time.monotonic() - begin, e)
            success = False
        duration = time.monotonic() - begin

        if success:
            log.debug("%s: collector succeeded after %.3fs", device.name, duration)
            sink.extend(staged.samples)
        sink.emit(SCRAPE_DURATION, duration, (device.name,))
        sink.emit(SCRAPE_SUCCESS, 1.0 if success else 0.0, (device.name,))
        return success

    def connect_and_collect(self, device: Device, sink: MetricSink) -> None:
        """Run every collector against one connection, stopping at the first error."""
        client = self._connect(device)
        try:
            ctx = ScrapeContext(sink=sink, device=device, client=client)
            for collector in self._collectors:
                collector.collect(ctx)
        finally:
            client.close()

    def _connect(self, device: Device):
        try:
            return self._connector(device, timeout=self._timeout, tls=self._tls,
                                   insecure=self._insecure)
        except Exception as e:
            log.error("%s: error dialing %s: %s", device.name, device.address, e)
            raise

    def _identify(self, device: Device) -> Device:
        """Rename an SRV-discovered device after its /system/identity."""
        try:
            client = self._connect(device)
        except Exception:
            return device
        try:
            reply = client.run("/system/identity/print")
        except Exception as e:
            log.error("%s: error fetching identity: %s", device.name, e)
            return device
        finally:
            client.close()

        for record in reply.records:
            if record.get("name"):
                return dataclasses.replace(device, name=record["name"])
        return device


def build_registry(collector: MikrotikCollector) -> CollectorRegistry:
    """Registry holding the device collector and the exporter build info."""
    registry = CollectorRegistry()
    registry.register(collector)
    info = Info("mikrotik_exporter_build", "mikrotik_exporter build information", registry=registry)
    info.info({"version": __version__})
    return registry
