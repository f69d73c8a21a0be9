"""PoE output current, voltage and power per port."""

from __future__ import annotations

from mikrotik_exporter.collector.base import MonitorCollector


class PoECollector(MonitorCollector):
    feature = "poe"
    subsystem = "poe"
    list_command = "/interface/ethernet/poe/print"
    monitor_command = "/interface/ethernet/poe/monitor"
    metrics = {
        "poe-out-current": ("current", "current in mA"),
        "poe-out-power": ("wattage", "Power in W"),
        "poe-out-voltage": ("voltage", "Voltage in V"),
    }
