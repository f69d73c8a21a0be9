"""
Feature name -> collector class.

interface and resource are always collected; everything else is
switched on by a feature flag. Collectors run in the order listed here.
"""

from __future__ import annotations

from mikrotik_exporter.collector.base import RouterOSCollector
from mikrotik_exporter.collector.bgp import BGPCollector
from mikrotik_exporter.collector.capsman import CapsmanCollector
from mikrotik_exporter.collector.cloud import CloudCollector
from mikrotik_exporter.collector.conntrack import ConntrackCollector
from mikrotik_exporter.collector.dhcp import DHCPCollector, DHCPLeaseCollector, DHCPv6Collector
from mikrotik_exporter.collector.firmware import FirmwareCollector
from mikrotik_exporter.collector.health import HealthCollector
from mikrotik_exporter.collector.interface import InterfaceCollector
from mikrotik_exporter.collector.ipsec import IPsecPeersCollector, IPsecPolicyCollector
from mikrotik_exporter.collector.monitor import EthernetMonitorCollector
from mikrotik_exporter.collector.netwatch import NetwatchCollector
from mikrotik_exporter.collector.optics import OpticsCollector
from mikrotik_exporter.collector.ospf import OSPFNeighborCollector
from mikrotik_exporter.collector.poe import PoECollector
from mikrotik_exporter.collector.pools import PoolCollector
from mikrotik_exporter.collector.resource import ResourceCollector
from mikrotik_exporter.collector.routes import RoutesCollector
from mikrotik_exporter.collector.w60g import W60GCollector
from mikrotik_exporter.collector.wireless import WirelessInterfaceCollector, WirelessStationCollector
from mikrotik_exporter.config import Features

ALWAYS_ON = (InterfaceCollector, ResourceCollector)

FEATURE_COLLECTORS = {
    "bgp": BGPCollector,
    "conntrack": ConntrackCollector,
    "dhcp": DHCPCollector,
    "dhcpl": DHCPLeaseCollector,
    "dhcpv6": DHCPv6Collector,
    "firmware": FirmwareCollector,
    "health": HealthCollector,
    "routes": RoutesCollector,
    "poe": PoECollector,
    "pools": PoolCollector,
    "optics": OpticsCollector,
    "w60g": W60GCollector,
    "wlansta": WirelessStationCollector,
    "capsman": CapsmanCollector,
    "wlanif": WirelessInterfaceCollector,
    "monitor": EthernetMonitorCollector,
    "ipsec": IPsecPolicyCollector,
    "ipsec_peers": IPsecPeersCollector,
    "netwatch": NetwatchCollector,
    "cloud": CloudCollector,
    "ospf_neighbor": OSPFNeighborCollector,
}


def build_collectors(features: Features) -> list[RouterOSCollector]:
    """Instantiate the always-on collectors plus every enabled feature."""
    collectors = [cls() for cls in ALWAYS_ON]
    for name, cls in FEATURE_COLLECTORS.items():
        if getattr(features, name):
            collectors.append(cls())
    return collectors
