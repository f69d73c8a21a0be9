"""Tests for the metric sink and family grouping."""

import threading

import pytest

from mikrotik_exporter.metrics import COUNTER, GAUGE, MetricDescription, MetricSink, new_family

DESC = MetricDescription("interface", "rx_byte", "rx-byte", ("name", "address", "interface"))


def test_emit_checks_label_count():
    sink = MetricSink()
    with pytest.raises(ValueError):
        sink.emit(DESC, 1, ("gw", "10.0.0.1"))


def test_emit_rejects_unknown_kind():
    sink = MetricSink()
    with pytest.raises(ValueError):
        sink.emit(DESC, 1, ("gw", "10.0.0.1", "ether1"), kind="histogram")


def test_families_group_by_description():
    sink = MetricSink()
    sink.emit(DESC, 10, ("gw", "10.0.0.1", "ether1"), COUNTER)
    sink.emit(DESC, 20, ("gw", "10.0.0.1", "ether2"), COUNTER)

    families = list(sink.families())
    assert len(families) == 1
    family = families[0]
    assert family.type == "counter"
    assert family.name == "mikrotik_interface_rx_byte"
    assert [s.value for s in family.samples] == [10.0, 20.0]
    assert family.samples[1].labels == {"name": "gw", "address": "10.0.0.1", "interface": "ether2"}


def test_gauge_family():
    family = new_family(MetricDescription("system", "cpu_load", "cpu-load", ("name",)), GAUGE)
    assert family.type == "gauge"
    assert family.documentation == "cpu-load"


def test_concurrent_producers():
    sink = MetricSink()

    def produce(device):
        for i in range(200):
            sink.emit(DESC, i, (device, "addr", f"ether{i}"), COUNTER)

    threads = [threading.Thread(target=produce, args=(f"dev{n}",)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(sink.samples) == 8 * 200
    family = next(sink.families())
    assert len(family.samples) == 8 * 200
