"""60 GHz (w60g) radio link quality."""

from __future__ import annotations

from mikrotik_exporter.collector.base import MonitorCollector


class W60GCollector(MonitorCollector):
    feature = "w60g"
    subsystem = "w60ginterface"
    list_command = "/interface/w60g/print"
    monitor_command = "/interface/w60g/monitor"
    metrics = {
        "frequency": ("frequency", "frequency of tx in MHz"),
        "tx-mcs": ("txMCS", "TX MCS"),
        "tx-phy-rate": ("txPHYRate", "PHY Rate in bps"),
        "signal": ("signal", "Signal quality in %"),
        "rssi": ("rssi", "Signal RSSI in dB"),
        "tx-sector": ("txSector", "TX Sector"),
        "distance": ("txDistance", "Distance to remote"),
        "tx-packet-error-rate": ("txPacketErrorRate", "TX Packet Error Rate"),
    }
