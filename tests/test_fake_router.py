"""Tests for the fake and simulated routers."""

import pytest
from librouteros.exceptions import TrapError

from mikrotik_exporter.config import Device
from mikrotik_exporter.mock.fake_router import (
    FakeRouterOS,
    SimulatedRouter,
    _format_duration,
    mock_connector,
)
from mikrotik_exporter.collector.helpers import parse_duration


def test_fake_router_replays_rows_and_records_calls():
    client = FakeRouterOS({"/system/identity/print": [{"name": "gw"}]})

    reply = client.run("/system/identity/print")

    assert reply.records == [{"name": "gw"}]
    assert client.calls == [("/system/identity/print", ())]
    assert client.run("/unknown/print").records == []


def test_fake_router_failures():
    client = FakeRouterOS(failures={"/ip/cloud/print"})
    with pytest.raises(TrapError):
        client.run("/ip/cloud/print")


def test_simulated_router_is_deterministic():
    a = SimulatedRouter("gw", seed=7)
    b = SimulatedRouter("gw", seed=7)
    for _ in range(5):
        assert a.run("/interface/print").records == b.run("/interface/print").records


def test_simulated_uptime_is_a_valid_duration():
    router = SimulatedRouter("gw")
    uptime = router.run("/system/resource/print").records[0]["uptime"]
    assert parse_duration(uptime) > 3 * 86400


def test_format_duration():
    assert _format_duration(272573) == "3d3h42m53s"
    assert _format_duration(604800) == "1w"


def test_mock_connector_reuses_router_per_device():
    device = Device(name="mock-test", address="192.0.2.50")
    assert mock_connector(device) is mock_connector(device)
