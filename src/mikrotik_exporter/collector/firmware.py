"""Installed RouterOS packages and their versions."""

from __future__ import annotations

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description


class FirmwareCollector(RouterOSCollector):
    feature = "firmware"

    def __init__(self):
        self._package = description(
            "system", "package", "system packages version",
            ("devicename", "name", "disabled", "version", "build_time"),
        )
        self.descriptions = (self._package,)

    def collect(self, ctx: ScrapeContext) -> None:
        reply = self.fetch(ctx, "/system/package/getall")
        for record in reply.records:
            disabled = record.get("disabled", "")
            value = 0.0 if disabled == "true" else 1.0
            ctx.emit(self._package, value, (
                ctx.device.name,
                record.get("name", ""),
                disabled,
                record.get("version", ""),
                record.get("build-time", ""),
            ))
