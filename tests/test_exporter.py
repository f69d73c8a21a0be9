"""Tests for the scrape orchestrator."""

import threading

from mikrotik_exporter import exporter
from mikrotik_exporter.collector.cloud import CloudCollector
from mikrotik_exporter.collector.conntrack import ConntrackCollector
from mikrotik_exporter.config import Config, Device, Features, SrvRecord
from mikrotik_exporter.exporter import MikrotikCollector, build_registry
from mikrotik_exporter.mock.fake_router import FakeRouterOS

GOOD = Device(name="good", address="10.0.0.1")
BROKEN = Device(name="broken", address="10.0.0.2")

CLOUD = {"/ip/cloud/print": [{"public-address": "203.0.113.1", "ddns-enabled": True}]}


def _families(collector):
    return {f.name: f for f in collector.collect()}


def _values(family):
    return {s.labels.get("device", s.labels.get("name")): s.value for s in family.samples}


def test_failed_device_does_not_affect_others():
    clients = {}

    def connector(device, **kwargs):
        if device.name == "broken":
            raise ConnectionRefusedError("connection refused")
        clients[device.name] = FakeRouterOS(CLOUD)
        return clients[device.name]

    collector = MikrotikCollector(Config(devices=(GOOD, BROKEN)), collectors=[CloudCollector()],
                                  connector=connector)
    families = _families(collector)

    assert _values(families["mikrotik_scrape_collector_success"]) == {"good": 1.0, "broken": 0.0}
    assert set(_values(families["mikrotik_scrape_collector_duration_seconds"])) == {"good", "broken"}
    assert _values(families["mikrotik_cloud_ddns_enabled"]) == {"good": 1.0}
    assert clients["good"].closed


def test_collector_error_aborts_remaining_collectors_for_that_device():
    clients = {}

    def connector(device, **kwargs):
        failures = {"/ip/cloud/print"} if device.name == "broken" else set()
        responses = dict(CLOUD)
        responses["/ip/firewall/connection/tracking/print"] = [{"total-entries": 5, "max-entries": 10}]
        clients[device.name] = FakeRouterOS(responses, failures=failures)
        return clients[device.name]

    collector = MikrotikCollector(Config(devices=(GOOD, BROKEN)),
                                  collectors=[CloudCollector(), ConntrackCollector()],
                                  connector=connector)
    families = _families(collector)

    assert _values(families["mikrotik_scrape_collector_success"]) == {"good": 1.0, "broken": 0.0}
    assert _values(families["mikrotik_conntrack_entries"]) == {"good": 5.0}
    assert [c[0] for c in clients["broken"].calls] == ["/ip/cloud/print"]
    assert clients["broken"].closed


def test_partial_samples_of_failed_device_are_dropped():
    def connector(device, **kwargs):
        return FakeRouterOS(CLOUD, failures={"/ip/firewall/connection/tracking/print"})

    collector = MikrotikCollector(Config(devices=(BROKEN,)),
                                  collectors=[CloudCollector(), ConntrackCollector()],
                                  connector=connector)
    families = _families(collector)

    assert "mikrotik_cloud_ddns_enabled" not in families
    assert _values(families["mikrotik_scrape_collector_success"]) == {"broken": 0.0}


def test_connector_receives_timeout_and_tls():
    seen = []

    def connector(device, **kwargs):
        seen.append(kwargs)
        return FakeRouterOS()

    collector = MikrotikCollector(Config(devices=(GOOD,)), collectors=[], timeout=2.0,
                                  tls=True, insecure=True, connector=connector)
    list(collector.collect())

    assert seen == [{"timeout": 2.0, "tls": True, "insecure": True}]


def test_every_device_is_scraped_once():
    names = []

    def connector(device, **kwargs):
        names.append(device.name)
        return FakeRouterOS()

    devices = tuple(Device(name=f"r{i}", address=f"10.0.1.{i}") for i in range(10))
    collector = MikrotikCollector(Config(devices=devices), collectors=[], connector=connector,
                                  max_workers=3)
    families = _families(collector)

    assert sorted(names) == sorted(d.name for d in devices)
    assert len(families["mikrotik_scrape_collector_success"].samples) == 10


def test_default_collectors_follow_features():
    collector = MikrotikCollector(Config(devices=(GOOD,), features=Features(bgp=True)))
    assert [c.feature for c in collector.collectors] == ["interface", "resource", "bgp"]


def test_describe_is_idempotent():
    collector = MikrotikCollector(Config(devices=(GOOD,), features=Features(cloud=True)))
    first = [(f.name, f.documentation) for f in collector.describe()]
    second = [(f.name, f.documentation) for f in collector.describe()]

    assert first == second
    assert ("mikrotik_scrape_collector_success",
            "mikrotik_exporter: whether a device collector succeeded") in first


def test_registry_does_not_scrape_on_register():
    calls = []

    def connector(device, **kwargs):
        calls.append(device)
        return FakeRouterOS()

    registry = build_registry(MikrotikCollector(Config(devices=(GOOD,)), connector=connector))
    assert calls == []

    names = {m.name for m in registry.collect()}
    assert "mikrotik_exporter_build" in names
    assert "mikrotik_scrape_collector_success" in names
    assert len(calls) == 1


def test_srv_devices_are_renamed_after_identity(monkeypatch):
    srv_device = Device(name="srv", srv=SrvRecord(record="_api._tcp.example.com"),
                        user="prometheus", password="secret")
    found = Device(name="r1.example.com", address="r1.example.com",
                   user="prometheus", password="secret")

    def fake_resolve(devices, identify=None):
        return [identify(found)]

    monkeypatch.setattr(exporter, "resolve_devices", fake_resolve)

    def connector(device, **kwargs):
        return FakeRouterOS({"/system/identity/print": [{"name": "core-router"}]})

    collector = MikrotikCollector(Config(devices=(srv_device,)), collectors=[], connector=connector)
    families = _families(collector)

    assert _values(families["mikrotik_scrape_collector_success"]) == {"core-router": 1.0}


def test_identity_failure_keeps_discovered_name():
    collector = MikrotikCollector(
        Config(devices=(GOOD,)), collectors=[],
        connector=lambda device, **kwargs: FakeRouterOS(failures={"/system/identity/print"}),
    )
    assert collector._identify(GOOD) == GOOD


def test_rejected_command_is_reported_as_failure():
    collector = MikrotikCollector(
        Config(devices=(GOOD,)), collectors=[CloudCollector()],
        connector=lambda device, **kwargs: FakeRouterOS(failures={"/ip/cloud/print"}),
    )
    success = _values(_families(collector)["mikrotik_scrape_collector_success"])
    assert success == {"good": 0.0}


def test_bad_srv_entry_does_not_hide_static_devices():
    bad_srv = Device(name="office", srv=SrvRecord(record="_api._tcp.example.com",
                                                  dns_address="dns.example.com"))
    collector = MikrotikCollector(Config(devices=(GOOD, bad_srv)), collectors=[CloudCollector()],
                                  connector=lambda device, **kwargs: FakeRouterOS(CLOUD))
    families = _families(collector)

    assert _values(families["mikrotik_scrape_collector_success"]) == {"good": 1.0}


def test_all_devices_run_concurrently_by_default():
    devices = tuple(Device(name=f"r{i}", address=f"10.0.2.{i}") for i in range(40))
    barrier = threading.Barrier(len(devices), timeout=5)

    def connector(device, **kwargs):
        barrier.wait()
        return FakeRouterOS()

    collector = MikrotikCollector(Config(devices=devices), collectors=[], connector=connector)
    families = _families(collector)

    assert set(_values(families["mikrotik_scrape_collector_success"]).values()) == {1.0}
