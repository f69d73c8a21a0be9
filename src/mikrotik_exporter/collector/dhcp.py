"""
DHCP collectors.

dhcp and dhcpv6 count leases/bindings per server with =count-only=;
dhcpl exports one series per lease so lease details can be joined in
queries.
"""

from __future__ import annotations

from mikrotik_exporter.collector.base import RouterOSCollector, ScrapeContext
from mikrotik_exporter.collector.helpers import description, parse_duration


class _ServerCountCollector(RouterOSCollector):
    """Counts entries per server: list the servers, then count-only each one."""

    servers_command = ""
    count_command = ""
    count_filters: tuple[str, ...] = ()

    def collect(self, ctx: ScrapeContext) -> None:
        servers = self.fetch(ctx, self.servers_command, "=.proplist=name")
        for record in servers.records:
            server = record.get("name", "")
            if not server:
                continue
            self.collect_for_server(ctx, server)

    def collect_for_server(self, ctx: ScrapeContext, server: str) -> None:
        reply = self.fetch(ctx, self.count_command, f"?server={server}",
                           *self.count_filters, "=count-only=")
        self.parse_and_emit(ctx, self.descriptions[0], reply.ret or "",
                            (ctx.device.name, ctx.device.address, server))


class DHCPCollector(_ServerCountCollector):
    feature = "dhcp"
    servers_command = "/ip/dhcp-server/print"
    count_command = "/ip/dhcp-server/lease/print"
    count_filters = ("=active=",)

    def __init__(self):
        self.descriptions = (description(
            "dhcp", "leases_active_count", "number of active leases per DHCP server",
            ("name", "address", "server"),
        ),)


class DHCPv6Collector(_ServerCountCollector):
    feature = "dhcpv6"
    servers_command = "/ipv6/dhcp-server/print"
    count_command = "/ipv6/dhcp-server/binding/print"

    def __init__(self):
        self.descriptions = (description(
            "dhcpv6", "binding_count", "number of active bindings per DHCPv6 server",
            ("name", "address", "server"),
        ),)


_LEASE_PROPS = ("active-mac-address", "server", "status", "expires-after",
                "active-address", "host-name")


class DHCPLeaseCollector(RouterOSCollector):
    feature = "dhcpl"

    def __init__(self):
        self._lease = description(
            "dhcp", "leases_metrics", "number of metrics",
            ("name", "address", "activemacaddress", "server", "status", "expiresafter",
             "activeaddress", "hostname"),
        )
        self._expires = description(
            "dhcp", "leases_expires_after_seconds", "seconds until the lease expires",
            ("name", "address", "activemacaddress", "server", "activeaddress", "hostname"),
        )
        self.descriptions = (self._lease, self._expires)

    def collect(self, ctx: ScrapeContext) -> None:
        reply = self.fetch(ctx, "/ip/dhcp-server/lease/print", "=.proplist=" + ",".join(_LEASE_PROPS))
        for record in reply.records:
            mac = record.get("active-mac-address", "")
            server = record.get("server", "")
            address = record.get("active-address", "")
            hostname = record.get("host-name", "")
            expires = record.get("expires-after", "")

            ctx.emit(self._lease, 1.0, (
                ctx.device.name, ctx.device.address, mac, server,
                record.get("status", ""), expires, address, hostname,
            ))
            self.parse_and_emit(
                ctx, self._expires, expires,
                (ctx.device.name, ctx.device.address, mac, server, address, hostname),
                convert=parse_duration,
            )
