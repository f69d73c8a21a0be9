"""Ethernet link status, negotiated rate and duplex."""

from __future__ import annotations

from mikrotik_exporter.collector.base import MonitorCollector
from mikrotik_exporter.collector.helpers import lookup_value

# Mbps
_RATES = {"10Mbps": 10.0, "100Mbps": 100.0, "1Gbps": 1000.0, "2.5Gbps": 2500.0,
          "5Gbps": 5000.0, "10Gbps": 10000.0, "25Gbps": 25000.0, "40Gbps": 40000.0,
          "100Gbps": 100000.0}


class EthernetMonitorCollector(MonitorCollector):
    feature = "monitor"
    subsystem = "monitor"
    list_command = "/interface/ethernet/print"
    monitor_command = "/interface/ethernet/monitor"
    metrics = {
        "status": ("status", "whether interface link is up (1) or down (0)"),
        "rate": ("rate", "actual interface connection data rate in Mbps"),
        "full-duplex": ("full_duplex", "full duplex data transmission"),
    }

    def convert(self, prop: str, raw: str) -> float:
        if prop == "status":
            return 1.0 if raw == "link-ok" else 0.0
        if prop == "rate":
            return lookup_value(raw, _RATES)
        return 1.0 if raw == "true" else 0.0
