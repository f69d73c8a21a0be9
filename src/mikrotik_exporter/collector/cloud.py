"""IP cloud (DDNS) status."""

from __future__ import annotations

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description_for_property, lookup_value

_DDNS_STATES = {"true": 1.0, "false": 0.0}


class CloudCollector(RouterOSCollector):
    feature = "cloud"

    def __init__(self):
        self._ddns = description_for_property(
            "cloud", "ddns-enabled", ("name", "address", "public_address"),
            "whether DDNS is enabled (1 = enabled)",
        )
        self.descriptions = (self._ddns,)

    def collect(self, ctx: ScrapeContext) -> None:
        reply = self.fetch(ctx, "/ip/cloud/print", "=.proplist=public-address,ddns-enabled")
        for record in reply.records:
            labels = (ctx.device.name, ctx.device.address, record.get("public-address", ""))
            self.parse_and_emit(ctx, self._ddns, record.get("ddns-enabled", ""), labels,
                                convert=lambda raw: lookup_value(raw, _DDNS_STATES))
