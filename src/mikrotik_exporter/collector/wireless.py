"""
Wireless collectors: registration table (connected stations) and
per-interface radio state.

Both work against the classic `wireless` package or, for devices with
`wifiwave2: true`, against the wifiwave2 package, which has different
command paths and property names.
"""

from __future__ import annotations

import logging

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import (
    PairParseError,
    description,
    description_for_property,
    split_pair_to_floats,
    strip_suffix,
)
from mikrotik_exporter.metrics import COUNTER

log = logging.getLogger(__name__)


class RegistrationTableCollector(RouterOSCollector):
    """Shared logic for station registration tables.

    `gauges` are single values (with any "@rate" suffix stripped),
    `pairs` are "tx,rx" strings exported as tx_<prop> and rx_<prop>
    counters. `aliases` maps a device property onto the property whose
    description it shares.
    """

    subsystem = ""
    identity: tuple[str, ...] = ()
    label_names: tuple[str, ...] = ()
    gauges: tuple[str, ...] = ()
    pairs: tuple[str, ...] = ()
    aliases: dict = {}

    def __init__(self):
        self._gauges = {
            prop: description_for_property(self.subsystem, prop, self.label_names)
            for prop in self.gauges
        }
        self._pairs = {
            prop: (
                description(self.subsystem, f"tx_{prop}", f"number of tx {prop}", self.label_names),
                description(self.subsystem, f"rx_{prop}", f"number of rx {prop}", self.label_names),
            )
            for prop in self.pairs
        }
        self.descriptions = tuple(self._gauges.values()) + tuple(
            d for pair in self._pairs.values() for d in pair)

    def command_for(self, ctx: ScrapeContext) -> tuple[str, tuple[str, ...]]:
        """(command, device properties to request) for this device."""
        raise NotImplementedError

    def convert(self, prop: str, raw: str) -> float:
        return float(strip_suffix(raw))

    def collect(self, ctx: ScrapeContext) -> None:
        command, props = self.command_for(ctx)
        reply = self.fetch(ctx, command, "=.proplist=" + ",".join(props))
        for record in reply.records:
            labels = (ctx.device.name, ctx.device.address,
                      *(record.get(prop, "") for prop in self.identity))
            for prop in props:
                target = self.aliases.get(prop, prop)
                if target in self._gauges:
                    self.parse_and_emit(ctx, self._gauges[target], record.get(prop, ""), labels,
                                        convert=lambda raw, target=target: self.convert(target, raw))
                elif target in self._pairs:
                    self._emit_pair(ctx, target, record.get(prop, ""), labels)

    def _emit_pair(self, ctx: ScrapeContext, prop: str, raw: str, labels) -> None:
        if raw == "":
            return
        try:
            tx, rx = split_pair_to_floats(raw)
        except PairParseError as e:
            log.warning("%s: skipping %s %s: %s", ctx.device.name, self.subsystem, prop, e)
            return
        tx_desc, rx_desc = self._pairs[prop]
        ctx.emit(tx_desc, tx, labels, COUNTER)
        ctx.emit(rx_desc, rx, labels, COUNTER)


class WirelessStationCollector(RegistrationTableCollector):
    feature = "wlansta"
    subsystem = "wlan_station"
    identity = ("interface", "mac-address")
    label_names = ("name", "address", "interface", "mac_address")
    gauges = ("signal-to-noise", "signal-strength")
    pairs = ("packets", "bytes", "frames")
    aliases = {"signal": "signal-strength"}

    def command_for(self, ctx: ScrapeContext):
        if ctx.device.wifiwave2:
            return ("/interface/wifiwave2/registration-table/print",
                    ("interface", "mac-address", "signal", "packets", "bytes"))
        return ("/interface/wireless/registration-table/print",
                ("interface", "mac-address", "signal-to-noise", "signal-strength",
                 "packets", "bytes", "frames"))


class WirelessInterfaceCollector(RouterOSCollector):
    """Radio state per enabled wireless interface (clients, noise, CCQ)."""

    feature = "wlanif"

    def __init__(self):
        labels = ("name", "address", "interface", "channel")
        self._metrics = {
            prop: description_for_property("wlan_interface", prop, labels)
            for prop in ("registered-clients", "noise-floor", "overall-tx-ccq")
        }
        self.descriptions = tuple(self._metrics.values())

    def collect(self, ctx: ScrapeContext) -> None:
        if ctx.device.wifiwave2:
            topic, props = "/interface/wifiwave2", ("channel", "registered-peers")
        else:
            topic, props = "/interface/wireless", ("channel", "registered-clients",
                                                   "noise-floor", "overall-tx-ccq")

        reply = self.fetch(ctx, f"{topic}/print", "?disabled=false", "=.proplist=name")
        for record in reply.records:
            iface = record.get("name", "")
            if iface:
                self._collect_interface(ctx, topic, iface, props)

    def _collect_interface(self, ctx: ScrapeContext, topic: str, iface: str, props) -> None:
        reply = self.fetch(ctx, f"{topic}/monitor", f"=numbers={iface}", "=once=",
                           "=.proplist=" + ",".join(props))
        for record in reply.records:
            labels = (ctx.device.name, ctx.device.address, iface, record.get("channel", ""))
            for prop in props[1:]:
                target = "registered-clients" if prop == "registered-peers" else prop
                self.parse_and_emit(ctx, self._metrics[target], record.get(prop, ""), labels)
