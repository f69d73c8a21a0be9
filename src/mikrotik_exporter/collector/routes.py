"""Routing table sizes, total and per protocol, for IPv4 and IPv6."""

from __future__ import annotations

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description

IP_VERSIONS = (("4", "ip"), ("6", "ipv6"))
PROTOCOLS = ("bgp", "static", "ospf", "dynamic", "connect")


class RoutesCollector(RouterOSCollector):
    feature = "routes"

    def __init__(self):
        labels = ("name", "address", "ip_version")
        self._total = description("routes", "total_count", "number of routes in RIB", labels)
        self._protocol = description("routes", "protocol_count",
                                     "number of routes per protocol in RIB", labels + ("protocol",))
        self.descriptions = (self._total, self._protocol)

    def collect(self, ctx: ScrapeContext) -> None:
        for ip_version, topic in IP_VERSIONS:
            self._count(ctx, topic, self._total, (ip_version,))
            for protocol in PROTOCOLS:
                self._count(ctx, topic, self._protocol, (ip_version, protocol), f"?{protocol}")

    def _count(self, ctx: ScrapeContext, topic: str, desc, extra_labels, *filters: str) -> None:
        reply = self.fetch(ctx, f"/{topic}/route/print", "?disabled=false", *filters, "=count-only=")
        labels = (ctx.device.name, ctx.device.address, *extra_labels)
        self.parse_and_emit(ctx, desc, reply.ret or "", labels)
