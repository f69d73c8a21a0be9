"""BGP peer sessions."""

from __future__ import annotations

from mikrotik_exporter.collector.base import PropertyCollector
from mikrotik_exporter.collector.helpers import description


class BGPCollector(PropertyCollector):
    feature = "bgp"
    subsystem = "bgp"
    command = "/routing/bgp/peer/print"
    properties = ("name", "remote-as", "state", "prefix-count", "updates-sent",
                  "updates-received", "withdrawn-sent", "withdrawn-received")
    identity = ("name", "remote-as")
    label_names = ("name", "address", "session", "asn")
    counters = frozenset({"updates-sent", "updates-received", "withdrawn-sent", "withdrawn-received"})
    help_texts = {
        "prefix-count": "number of prefixes received from the peer",
        "updates-sent": "number of update messages sent",
        "updates-received": "number of update messages received",
        "withdrawn-sent": "number of withdraw messages sent",
        "withdrawn-received": "number of withdraw messages received",
    }

    def __init__(self):
        super().__init__()
        # state is exposed as bgp_up rather than bgp_state
        self._metrics["state"] = description(
            self.subsystem, "up", "BGP session is established (up = 1)", self.label_names)
        self.descriptions = tuple(self._metrics.values())

    def convert(self, prop: str, raw: str) -> float:
        if prop == "state":
            return 1.0 if raw == "established" else 0.0
        return float(raw)
