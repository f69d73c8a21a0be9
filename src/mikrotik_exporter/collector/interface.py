"""Traffic counters for running, enabled interfaces."""

from __future__ import annotations

from mikrotik_exporter.collector.base import PropertyCollector


class InterfaceCollector(PropertyCollector):
    feature = "interface"
    subsystem = "interface"
    command = "/interface/print"
    filters = ("?disabled=false", "?running=true")
    properties = ("name", "comment", "rx-byte", "tx-byte", "rx-packet", "tx-packet",
                  "rx-error", "tx-error", "rx-drop", "tx-drop")
    identity = ("name", "comment")
    label_names = ("name", "address", "interface", "comment")
    counters = frozenset(properties)
