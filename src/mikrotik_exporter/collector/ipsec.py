"""IPsec policies and active peers."""

from __future__ import annotations

from typing import Mapping

from mikrotik_exporter.collector.base import PropertyCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import parse_duration


class IPsecPolicyCollector(PropertyCollector):
    """Static, enabled policies; phase 2 state plus the active/invalid flags."""

    feature = "ipsec"
    subsystem = "ipsec"
    command = "/ip/ipsec/policy/print"
    filters = ("?disabled=false", "?dynamic=false")
    properties = ("src-address", "dst-address", "comment", "ph2-state", "invalid", "active")
    identity = ("src-address", "dst-address", "comment")
    label_names = ("devicename", "srcdst", "comment")
    help_texts = {
        "ph2-state": "phase 2 state of the policy (established = 1)",
        "invalid": "whether the policy is invalid",
        "active": "whether the policy is active",
    }

    def labels_for(self, ctx: ScrapeContext, record: Mapping[str, str]) -> tuple[str, ...]:
        srcdst = f"{record.get('src-address', '')}-{record.get('dst-address', '')}"
        return (ctx.device.name, srcdst, record.get("comment", ""))

    def convert(self, prop: str, raw: str) -> float:
        if prop == "ph2-state":
            return 1.0 if raw == "established" else 0.0
        return 1.0 if raw == "true" else 0.0


class IPsecPeersCollector(PropertyCollector):
    feature = "ipsec_peers"
    subsystem = "ipsec_peers"
    command = "/ip/ipsec/active-peers/print"
    properties = ("local-address", "remote-address", "state", "side", "uptime",
                  "rx-bytes", "rx-packets", "tx-bytes", "tx-packets")
    identity = ("local-address", "remote-address", "state", "side")
    label_names = ("devicename", "local_address", "remote_address", "state", "side")
    counters = frozenset({"rx-bytes", "rx-packets", "tx-bytes", "tx-packets"})

    def labels_for(self, ctx: ScrapeContext, record: Mapping[str, str]) -> tuple[str, ...]:
        return (ctx.device.name, *(record.get(prop, "") for prop in self.identity))

    def convert(self, prop: str, raw: str) -> float:
        if prop == "uptime":
            return parse_duration(raw)
        return float(raw)
