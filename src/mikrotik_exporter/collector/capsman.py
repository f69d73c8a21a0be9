"""CAPsMAN registration table: stations connected through managed APs."""

from __future__ import annotations

from mikrotik_exporter.collector.base import ScrapeContext
from mikrotik_exporter.collector.helpers import parse_duration, strip_suffix
from mikrotik_exporter.collector.wireless import RegistrationTableCollector

_PROPS = ("interface", "mac-address", "ssid", "uptime", "tx-signal", "rx-signal",
          "packets", "bytes")


class CapsmanCollector(RegistrationTableCollector):
    feature = "capsman"
    subsystem = "capsman_station"
    identity = ("interface", "mac-address", "ssid")
    label_names = ("name", "address", "interface", "mac_address", "ssid")
    gauges = ("uptime", "tx-signal", "rx-signal")
    pairs = ("packets", "bytes")

    def command_for(self, ctx: ScrapeContext):
        return "/caps-man/registration-table/print", _PROPS

    def convert(self, prop: str, raw: str) -> float:
        if prop == "uptime":
            return parse_duration(raw)
        return float(strip_suffix(raw))
