"""System resources: memory, CPU load, disk and uptime."""

from __future__ import annotations

from mikrotik_exporter.collector.base import PropertyCollector
from mikrotik_exporter.collector.helpers import parse_duration


class ResourceCollector(PropertyCollector):
    feature = "resource"
    subsystem = "system"
    command = "/system/resource/print"
    properties = ("free-memory", "total-memory", "cpu-load", "free-hdd-space",
                  "total-hdd-space", "uptime", "board-name", "version")
    identity = ("board-name", "version")
    label_names = ("name", "address", "boardname", "version")

    def convert(self, prop: str, raw: str) -> float:
        if prop == "uptime":
            return parse_duration(raw)
        return float(raw)
