"""OSPF neighbor state changes."""

from __future__ import annotations

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description
from mikrotik_exporter.metrics import COUNTER

_PROPS = ("instance", "router-id", "address", "interface", "state", "state-changes")


class OSPFNeighborCollector(RouterOSCollector):
    feature = "ospf_neighbor"

    def __init__(self):
        self._state_changes = description(
            "ospf_neighbor", "state_changes", "OSPF neighbor state changes counter",
            ("name", "address", "instance", "router_id", "neighbor_address", "interface", "state"),
        )
        self.descriptions = (self._state_changes,)

    def collect(self, ctx: ScrapeContext) -> None:
        reply = self.fetch(ctx, "/routing/ospf/neighbor/print", "=.proplist=" + ",".join(_PROPS))
        for record in reply.records:
            labels = (
                ctx.device.name,
                ctx.device.address,
                record.get("instance", ""),
                record.get("router-id", ""),
                record.get("address", ""),
                record.get("interface", ""),
                record.get("state", ""),
            )
            self.parse_and_emit(ctx, self._state_changes, record.get("state-changes", ""),
                                labels, kind=COUNTER)
