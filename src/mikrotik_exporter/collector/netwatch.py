"""Netwatch host probes."""

from __future__ import annotations

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description, lookup_value

_STATUS = {"up": 1.0, "unknown": 0.0, "down": -1.0}


class NetwatchCollector(RouterOSCollector):
    feature = "netwatch"

    def __init__(self):
        self._status = description(
            "netwatch", "status", "Netwatch host status (up = 1, unknown = 0, down = -1)",
            ("name", "address", "host", "comment"),
        )
        self.descriptions = (self._status,)

    def collect(self, ctx: ScrapeContext) -> None:
        reply = self.fetch(ctx, "/tool/netwatch/print", "?disabled=false",
                           "=.proplist=host,comment,status")
        for record in reply.records:
            labels = (ctx.device.name, ctx.device.address,
                      record.get("host", ""), record.get("comment", ""))
            self.parse_and_emit(ctx, self._status, record.get("status", ""), labels,
                                convert=lambda raw: lookup_value(raw, _STATUS))
