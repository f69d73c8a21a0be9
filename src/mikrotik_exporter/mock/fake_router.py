"""
Fake RouterOS API connections for testing without a router.

FakeRouterOS answers commands from a canned table and is what the tests
hand to collectors. SimulatedRouter builds on it with a small home/office
router whose counters keep moving between scrapes; `--mock` serves
metrics from a couple of those.

    mikrotik-exporter --mock
"""

from __future__ import annotations

import math
import random
import threading
from typing import Callable, Mapping, Union

from librouteros.exceptions import TrapError

from mikrotik_exporter.config import Config, Device, Features
from mikrotik_exporter.routeros import Reply, to_reply

Rows = list
Handler = Union[Rows, Callable[[tuple], Rows]]


class FakeRouterOS:
    """Canned command -> rows table standing in for an API connection.

    A handler is either a list of rows or a callable taking the command
    words and returning rows. Commands listed in `failures` raise a
    TrapError like a router rejecting the command would.
    """

    def __init__(self, responses: Mapping[str, Handler] = None, failures=()):
        self.responses = dict(responses or {})
        self.failures = set(failures)
        self.calls: list[tuple[str, tuple]] = []
        self.closed = False

    def run(self, command: str, *words: str) -> Reply:
        self.calls.append((command, words))
        if command in self.failures:
            raise TrapError(f"no such command prefix: {command}")
        handler = self.responses.get(command, [])
        rows = handler(words) if callable(handler) else handler
        return to_reply(rows)

    def close(self):
        self.closed = True


def count_only(rows_for: Callable[[tuple], int]) -> Callable[[tuple], Rows]:
    """Handler answering =count-only= requests with a ret value."""
    return lambda words: [{"ret": rows_for(words)}]


def word_value(words: tuple, prefix: str) -> str:
    """Value of the first word starting with prefix, e.g. "?server=" -> "lan"."""
    for word in words:
        if word.startswith(prefix):
            return word[len(prefix):]
    return ""


class SimulatedRouter(FakeRouterOS):
    """A hAP-sized router with a few clients and a BGP uplink.

    Traffic follows a slow sine wave with the occasional burst; memory
    and CPU wobble around a baseline. Numbers are only meant to look
    plausible on a dashboard.
    """

    INTERFACES = ("ether1", "ether2", "bridge", "wlan1")

    def __init__(self, name: str, seed: int = 42):
        super().__init__()
        self.name = name
        self._rng = random.Random(seed)
        self._tick = 0
        self._uptime = 3 * 86400 + 3 * 3600
        self._bytes = {iface: 0 for iface in self.INTERFACES}
        self._packets = {iface: 0 for iface in self.INTERFACES}
        self.responses = {
            "/system/identity/print": [{"name": name}],
            "/interface/print": self._interfaces,
            "/system/resource/print": self._resource,
            "/system/health/print": self._health,
            "/system/package/getall": [
                {"name": "routeros", "version": "7.14.3", "build-time": "2024-04-17 12:47:58",
                 "disabled": False},
                {"name": "wifiwave2", "version": "7.14.3", "build-time": "2024-04-17 12:47:58",
                 "disabled": True},
            ],
            "/routing/bgp/peer/print": self._bgp,
            "/ip/dhcp-server/print": [{"name": "lan"}, {"name": "guest"}],
            "/ip/dhcp-server/lease/print": self._leases,
            "/ip/route/print": count_only(self._route_count),
            "/ipv6/route/print": count_only(lambda words: self._route_count(words) // 4),
            "/ip/pool/print": [{"name": "dhcp_pool"}],
            "/ip/pool/used/print": count_only(lambda words: 14 + self._tick % 5),
            "/ip/cloud/print": [{"public-address": "203.0.113.17", "ddns-enabled": True}],
            "/ip/firewall/connection/tracking/print": self._conntrack,
            "/tool/netwatch/print": [
                {"host": "1.1.1.1", "comment": "cloudflare", "status": "up"},
                {"host": "192.168.88.250", "comment": "nas", "status": "down"},
            ],
            "/interface/wireless/registration-table/print": self._stations,
        }

    def run(self, command: str, *words: str) -> Reply:
        if command == "/interface/print":
            self._advance()
        return super().run(command, *words)

    def _advance(self):
        self._tick += 1
        self._uptime += 15
        load = 1 + 0.8 * math.sin(self._tick * 0.1)
        burst = self._rng.random() * 5 if self._rng.random() > 0.9 else 0
        for iface in self.INTERFACES:
            rate = int((load + burst) * self._rng.uniform(80_000, 120_000))
            self._bytes[iface] += rate * 15
            self._packets[iface] += rate * 15 // 900

    def _interfaces(self, words):
        return [
            {"name": iface, "comment": "", "rx-byte": self._bytes[iface],
             "tx-byte": self._bytes[iface] // 3, "rx-packet": self._packets[iface],
             "tx-packet": self._packets[iface] // 2, "rx-error": 0, "tx-error": 0,
             "rx-drop": self._tick // 40, "tx-drop": 0}
            for iface in self.INTERFACES
        ]

    def _resource(self, words):
        used = 70_000_000 + int(self._rng.gauss(0, 2_000_000))
        return [{
            "free-memory": 268_435_456 - used,
            "total-memory": 268_435_456,
            "cpu-load": max(0, min(100, int(8 + 6 * math.sin(self._tick * 0.2) + self._rng.gauss(0, 2)))),
            "free-hdd-space": 100_000_000,
            "total-hdd-space": 134_217_728,
            "uptime": _format_duration(self._uptime),
            "board-name": "hAP ax^2",
            "version": "7.14.3 (stable)",
        }]

    def _health(self, words):
        return [
            {"name": "voltage", "value": f"{24 + self._rng.uniform(-0.2, 0.2):.1f}"},
            {"name": "cpu-temperature", "value": str(45 + self._rng.randint(0, 6))},
        ]

    def _bgp(self, words):
        return [
            {"name": "transit", "remote-as": 64500, "state": "established",
             "prefix-count": 950_000 + self._tick, "updates-sent": 12, "updates-received": 3_000 + self._tick * 7,
             "withdrawn-sent": 0, "withdrawn-received": 40 + self._tick},
            {"name": "backup", "remote-as": 64501, "state": "active"},
        ]

    def _leases(self, words):
        if "=count-only=" in words:
            server = word_value(words, "?server=")
            return [{"ret": 9 if server == "lan" else 2}]
        return [
            {"active-mac-address": "AA:BB:CC:00:00:01", "server": "lan", "status": "bound",
             "expires-after": "8m12s", "active-address": "192.168.88.10", "host-name": "laptop"},
        ]

    def _route_count(self, words):
        counts = {"?bgp": 950_000, "?static": 3, "?ospf": 0, "?dynamic": 950_004, "?connect": 4}
        for word, count in counts.items():
            if word in words:
                return count
        return 950_007

    def _conntrack(self, words):
        return [{"total-entries": 400 + self._rng.randint(0, 200), "max-entries": 1_048_576}]

    def _stations(self, words):
        return [{
            "interface": "wlan1", "mac-address": "AA:BB:CC:00:00:02",
            "signal-to-noise": 38, "signal-strength": f"-{60 + self._rng.randint(0, 8)}@HT20-7",
            "packets": f"{self._packets['wlan1']},{self._packets['wlan1'] * 2}",
            "bytes": f"{self._bytes['wlan1']},{self._bytes['wlan1'] * 3}",
            "frames": f"{self._packets['wlan1']},{self._packets['wlan1'] * 2}",
        }]


def _format_duration(seconds: int) -> str:
    weeks, rest = divmod(seconds, 604800)
    days, rest = divmod(rest, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    parts = [(weeks, "w"), (days, "d"), (hours, "h"), (minutes, "m"), (secs, "s")]
    return "".join(f"{value}{unit}" for value, unit in parts if value)


MOCK_DEVICES = (
    Device(name="mock-gw", address="192.0.2.1", user="prometheus", password="mock"),
    Device(name="mock-office", address="192.0.2.2", user="prometheus", password="mock"),
)

MOCK_FEATURES = Features(bgp=True, conntrack=True, dhcp=True, dhcpl=True, firmware=True,
                         health=True, routes=True, pools=True, wlansta=True, netwatch=True,
                         cloud=True)

_routers: dict = {}
_routers_lock = threading.Lock()


def mock_config() -> Config:
    return Config(devices=MOCK_DEVICES, features=MOCK_FEATURES)


def mock_connector(device: Device, **kwargs) -> SimulatedRouter:
    """Connector handing out one long-lived simulated router per device."""
    with _routers_lock:
        router = _routers.get(device.name)
        if router is None:
            router = SimulatedRouter(device.name, seed=len(_routers) + 42)
            _routers[device.name] = router
    return router
