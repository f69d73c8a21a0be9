"""SFP module diagnostics (DDM) for sfp* ethernet ports."""

from __future__ import annotations

from mikrotik_exporter.collector.base import MonitorCollector

# sfp-rx-loss / sfp-tx-fault report a problem when true
_FAULT_FLAGS = ("sfp-rx-loss", "sfp-tx-fault")


class OpticsCollector(MonitorCollector):
    feature = "optics"
    subsystem = "optics"
    list_command = "/interface/ethernet/print"
    monitor_command = "/interface/ethernet/monitor"
    metrics = {
        "sfp-rx-loss": ("rx_status", "RX status (1 = no loss)"),
        "sfp-tx-fault": ("tx_status", "TX status (1 = no faults)"),
        "sfp-rx-power": ("rx_power_dbm", "RX power in dBM"),
        "sfp-tx-power": ("tx_power_dbm", "TX power in dBM"),
        "sfp-temperature": ("temperature_celsius", "temperature in degree celsius"),
        "sfp-tx-bias-current": ("tx_bias_ma", "bias is milliamps"),
        "sfp-supply-voltage": ("voltage_volt", "volage in volt"),
    }

    def wants(self, interface: str) -> bool:
        return interface.startswith("sfp")

    def convert(self, prop: str, raw: str) -> float:
        if prop in _FAULT_FLAGS:
            return 0.0 if raw == "true" else 1.0
        return float(raw)
