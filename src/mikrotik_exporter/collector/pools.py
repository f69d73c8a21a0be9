"""Used addresses/prefixes per IP pool."""

from __future__ import annotations

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description
from mikrotik_exporter.collector.routes import IP_VERSIONS


class PoolCollector(RouterOSCollector):
    feature = "pools"

    def __init__(self):
        self._used = description(
            "ip_pool", "pool_used_count", "number of used IP/prefixes in a pool",
            ("name", "address", "ip_version", "pool"),
        )
        self.descriptions = (self._used,)

    def collect(self, ctx: ScrapeContext) -> None:
        for ip_version, topic in IP_VERSIONS:
            pools = self.fetch(ctx, f"/{topic}/pool/print", "=.proplist=name")
            for record in pools.records:
                pool = record.get("name", "")
                if not pool:
                    continue
                reply = self.fetch(ctx, f"/{topic}/pool/used/print", f"?pool={pool}", "=count-only=")
                self.parse_and_emit(ctx, self._used, reply.ret or "",
                                    (ctx.device.name, ctx.device.address, ip_version, pool))
