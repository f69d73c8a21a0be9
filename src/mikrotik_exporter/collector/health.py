"""Board health sensors (voltage, temperatures)."""

from __future__ import annotations

import logging

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description_for_property

log = logging.getLogger(__name__)

_SENSORS = {
    "voltage": "Input voltage to the RouterOS board, in volts",
    "temperature": "Temperature of RouterOS board, in degrees Celsius",
    "cpu-temperature": "Temperature of RouterOS CPU, in degrees Celsius",
}


class HealthCollector(RouterOSCollector):
    """Reads /system/health.

    RouterOS 7 returns one record per sensor (name/value), RouterOS 6 a
    single record with one key per sensor. Both are handled.
    """

    feature = "health"

    def __init__(self):
        self._sensors = {
            sensor: description_for_property("health", sensor, ("name", "address"), help_text)
            for sensor, help_text in _SENSORS.items()
        }
        self.descriptions = tuple(self._sensors.values())

    def collect(self, ctx: ScrapeContext) -> None:
        reply = self.fetch(ctx, "/system/health/print")
        labels = (ctx.device.name, ctx.device.address)

        for record in reply.records:
            if "value" in record:
                desc = self._sensors.get(record.get("name", ""))
                if desc is None:
                    log.debug("%s: ignoring health sensor %r", ctx.device.name, record.get("name"))
                    continue
                self.parse_and_emit(ctx, desc, record["value"], labels)
            else:
                for sensor, desc in self._sensors.items():
                    self.parse_and_emit(ctx, desc, record.get(sensor, ""), labels)
