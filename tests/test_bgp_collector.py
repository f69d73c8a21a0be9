"""BGP peer collector against a fake router."""

import pytest

from mikrotik_exporter.collector.base import ScrapeContext
from mikrotik_exporter.collector.bgp import BGPCollector
from mikrotik_exporter.config import Device
from mikrotik_exporter.metrics import MetricSink
from mikrotik_exporter.mock.fake_router import FakeRouterOS

DEVICE = Device(name="edge", address="10.0.0.1")


def _samples_for(peers):
    sink = MetricSink()
    client = FakeRouterOS({"/routing/bgp/peer/print": peers})
    BGPCollector().collect(ScrapeContext(sink=sink, device=DEVICE, client=client))
    return {(s.description.name, s.label_values[2]): s for s in sink.samples}


def test_established_session_is_up():
    samples = _samples_for([{"name": "transit", "remote-as": 64500, "state": "established"}])

    up = samples[("up", "transit")]
    assert up.value == 1
    assert up.description.fq_name == "mikrotik_bgp_up"
    assert up.label_values == ("edge", "10.0.0.1", "transit", "64500")


@pytest.mark.parametrize("state", ["idle", "active", "connect", "opensent"])
def test_other_states_are_down(state):
    samples = _samples_for([{"name": "backup", "remote-as": 64501, "state": state}])
    assert samples[("up", "backup")].value == 0


def test_peer_counters():
    samples = _samples_for([{
        "name": "transit", "remote-as": 64500, "state": "established",
        "prefix-count": 950000, "updates-received": 3000, "withdrawn-received": "",
    }])

    assert samples[("prefix_count", "transit")].value == 950000
    assert samples[("prefix_count", "transit")].kind == "gauge"
    assert samples[("updates_received", "transit")].kind == "counter"
    # absent values are skipped, not zeroed
    assert ("withdrawn_received", "transit") not in samples


def test_describe_is_cached():
    collector = BGPCollector()
    first = collector.describe()
    second = collector.describe()

    assert first == second
    assert "mikrotik_bgp_up" in {d.fq_name for d in first}
    assert "mikrotik_bgp_state" not in {d.fq_name for d in first}
