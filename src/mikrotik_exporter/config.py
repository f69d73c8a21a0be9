"""
Device and feature configuration.

Loaded once at startup, either from a YAML file or from the
single-device command line flags. Everything here is frozen: device
tasks share these objects across threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import dns.inet
import yaml

log = logging.getLogger(__name__)

API_PORT = 8728
API_PORT_TLS = 8729
DNS_PORT = 53


class ConfigError(Exception):
    """Configuration could not be loaded or is incomplete."""


@dataclass(frozen=True)
class SrvRecord:
    record: str
    dns_address: Optional[str] = None
    dns_port: int = DNS_PORT


@dataclass(frozen=True)
class Device:
    name: str
    address: str = ""
    user: str = ""
    password: str = ""
    port: Optional[int] = None
    wifiwave2: bool = False
    tls: Optional[bool] = None        # None: use the global --tls setting
    insecure: Optional[bool] = None
    srv: Optional[SrvRecord] = None

    def port_for(self, tls: bool) -> int:
        if self.port:
            return self.port
        return API_PORT_TLS if tls else API_PORT


@dataclass(frozen=True)
class Features:
    bgp: bool = False
    conntrack: bool = False
    dhcp: bool = False
    dhcpl: bool = False
    dhcpv6: bool = False
    firmware: bool = False
    health: bool = False
    routes: bool = False
    poe: bool = False
    pools: bool = False
    optics: bool = False
    w60g: bool = False
    wlansta: bool = False
    capsman: bool = False
    wlanif: bool = False
    monitor: bool = False
    ipsec: bool = False
    ipsec_peers: bool = False
    netwatch: bool = False
    cloud: bool = False
    ospf_neighbor: bool = False

    @classmethod
    def names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def enabled(self) -> list[str]:
        return [name for name in self.names() if getattr(self, name)]

    def merged(self, **flags: bool) -> "Features":
        """Return a copy with the given flags OR-ed in."""
        values = {name: getattr(self, name) or bool(flags.get(name)) for name in self.names()}
        return Features(**values)


@dataclass(frozen=True)
class Config:
    devices: tuple[Device, ...] = ()
    features: Features = field(default_factory=Features)


def _device_from_dict(raw: dict) -> Device:
    if not isinstance(raw, dict):
        raise ConfigError(f"device entry must be a mapping, got {raw!r}")

    srv = None
    if raw.get("srv"):
        srv_raw = raw["srv"]
        if not srv_raw.get("record"):
            raise ConfigError(f"device {raw.get('name')!r}: srv needs a record")
        dns_raw = srv_raw.get("dns") or {}
        dns_address = dns_raw.get("address")
        if dns_address and not dns.inet.is_address(str(dns_address)):
            raise ConfigError(f"device {raw.get('name')!r}: dns address {dns_address!r} "
                              f"must be an IP address")
        try:
            dns_port = int(dns_raw.get("port") or DNS_PORT)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"device {raw.get('name')!r}: invalid dns port "
                              f"{dns_raw.get('port')!r}") from e
        srv = SrvRecord(
            record=srv_raw["record"],
            dns_address=str(dns_address) if dns_address else None,
            dns_port=dns_port,
        )

    name = raw.get("name") or (srv.record if srv else None)
    if not name:
        raise ConfigError(f"device entry without a name: {raw!r}")
    if srv is None and not raw.get("address"):
        raise ConfigError(f"device {name!r} has neither an address nor an srv record")

    try:
        port = int(raw["port"]) if raw.get("port") else None
    except (TypeError, ValueError) as e:
        raise ConfigError(f"device {name!r}: invalid port {raw['port']!r}") from e

    return Device(
        name=str(name),
        address=str(raw.get("address") or ""),
        user=str(raw.get("user") or ""),
        password=str(raw.get("password") or ""),
        port=port,
        wifiwave2=bool(raw.get("wifiwave2", False)),
        tls=raw.get("tls"),
        insecure=raw.get("insecure"),
        srv=srv,
    )


def _features_from_dict(raw: dict) -> Features:
    if not isinstance(raw, dict):
        raise ConfigError(f"features must be a mapping, got {raw!r}")
    known = set(Features.names())
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"unknown features: {', '.join(unknown)}")
    return Features(**{name: bool(value) for name, value in raw.items()})


def parse_config(text: str) -> Config:
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError("config must be a mapping with a devices list")

    devices = tuple(_device_from_dict(d) for d in raw.get("devices") or [])
    if not devices:
        raise ConfigError("no devices configured")
    return Config(devices=devices, features=_features_from_dict(raw.get("features") or {}))


def load_config(path: str) -> Config:
    """Read and validate a YAML config file."""
    try:
        text = Path(path).read_text()
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e

    config = parse_config(text)
    log.info("loaded %d device(s) from %s", len(config.devices), path)
    return config


def single_device_config(name: Optional[str], address: Optional[str], user: Optional[str],
                         password: Optional[str], port: Optional[int] = None) -> Config:
    """Config built from the --device/--address/--user/--password flags."""
    missing = [flag for flag, value in (("--device", name), ("--address", address),
                                        ("--user", user), ("--password", password)) if not value]
    if missing:
        raise ConfigError(f"missing required flags: {', '.join(missing)}")
    return Config(devices=(Device(name=name, address=address, user=user,
                                  password=password, port=port),))
