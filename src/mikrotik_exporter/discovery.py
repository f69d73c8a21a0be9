"""
DNS SRV device discovery.

A device configured with an `srv` record stands for every target the
record resolves to. Expansion happens before each scrape and produces
plain Device records; the orchestrator never sees the SRV entry itself.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Iterable, Optional

import dns.exception
import dns.resolver

from mikrotik_exporter.config import Device

log = logging.getLogger(__name__)


def _resolver_for(device: Device) -> dns.resolver.Resolver:
    if device.srv.dns_address:
        resolver = dns.resolver.Resolver(configure=False)
        resolver.nameservers = [device.srv.dns_address]
        resolver.port = device.srv.dns_port
        log.info("%s: using DNS server %s:%d", device.name, device.srv.dns_address,
                 device.srv.dns_port)
        return resolver
    return dns.resolver.Resolver()


def expand_srv(device: Device, resolve=None) -> list[Device]:
    """Resolve a device's SRV record into one Device per target.

    `resolve` takes (device, record) and returns the SRV answer; it
    defaults to a dnspython lookup. Lookup failures, including a
    nameserver dnspython refuses, are logged and give an empty list, so
    the rest of the scrape carries on.
    """
    log.info("%s: SRV configuration detected (%s)", device.name, device.srv.record)
    try:
        if resolve is None:
            answer = _resolver_for(device).resolve(device.srv.record, "SRV")
        else:
            answer = resolve(device, device.srv.record)
    except (dns.exception.DNSException, ValueError) as e:
        log.error("%s: SRV lookup for %s failed: %s", device.name, device.srv.record, e)
        return []

    devices = []
    for rdata in answer:
        target = str(rdata.target).rstrip(".")
        devices.append(dataclasses.replace(device, name=target, address=target, srv=None))
    return devices


def resolve_devices(
    devices: Iterable[Device],
    identify: Optional[Callable[[Device], Device]] = None,
    resolve=None,
) -> list[Device]:
    """Flatten configured devices into concrete ones.

    `identify` is applied to every SRV-discovered device, e.g. to rename
    it after the router's /system/identity.
    """
    concrete = []
    for device in devices:
        if device.srv is None:
            concrete.append(device)
            continue
        for found in expand_srv(device, resolve=resolve):
            concrete.append(identify(found) if identify else found)
    return concrete
