"""Connection tracking table usage."""

from __future__ import annotations

from mikrotik_exporter.collector.base import PropertyCollector
from mikrotik_exporter.collector.helpers import description


class ConntrackCollector(PropertyCollector):
    feature = "conntrack"
    subsystem = "conntrack"
    command = "/ip/firewall/connection/tracking/print"
    properties = ("total-entries", "max-entries")

    def __init__(self):
        self._metrics = {
            "total-entries": description(self.subsystem, "entries",
                                         "Number of tracked connections", self.label_names),
            "max-entries": description(self.subsystem, "max-entries",
                                       "Conntrack table capacity", self.label_names),
        }
        self.descriptions = tuple(self._metrics.values())
