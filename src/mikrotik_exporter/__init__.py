"""Prometheus exporter for MikroTik RouterOS devices."""

__version__ = "0.1.0"
