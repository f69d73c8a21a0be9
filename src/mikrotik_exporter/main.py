"""
mikrotik-exporter entry point.

Usage:
    mikrotik-exporter --config-file config.yml           Serve metrics for configured devices
    mikrotik-exporter --device gw --address 10.0.0.1 \\
        --user prometheus --password secret             Single device from flags
    mikrotik-exporter --mock                            Simulated routers, no hardware needed
    mikrotik-exporter --mock scrape                     One scrape printed to stdout
"""

from __future__ import annotations

import dataclasses
import logging
import sys

import click
from prometheus_client import generate_latest

from mikrotik_exporter import __version__
from mikrotik_exporter.config import ConfigError, Features, load_config, single_device_config
from mikrotik_exporter.exporter import MikrotikCollector, build_registry
from mikrotik_exporter.mock.fake_router import mock_config, mock_connector
from mikrotik_exporter.routeros import DEFAULT_TIMEOUT
from mikrotik_exporter.server import DEFAULT_PATH, DEFAULT_PORT, serve

log = logging.getLogger("mikrotik_exporter")

EXIT_CONFIG_ERROR = 3


def _feature_options(func):
    """Add one --with-<feature> flag per optional collector."""
    for name in reversed(Features.names()):
        flag = "--with-" + name.replace("_", "-")
        func = click.option(flag, f"with_{name}", is_flag=True, default=False,
                            help=f"Enable the {name} collector")(func)
    return func


def setup_logging(level: str, fmt: str):
    if fmt == "rich":
        from rich.logging import RichHandler

        logging.basicConfig(level=level.upper(), format="%(message)s", datefmt="%H:%M:%S",
                            handlers=[RichHandler(rich_tracebacks=True)])
    else:
        logging.basicConfig(
            level=level.upper(),
            format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )


def _build_collector(opts: dict) -> MikrotikCollector:
    flags = {name: opts[f"with_{name}"] for name in Features.names()}

    if opts["mock"]:
        config = mock_config()
        return MikrotikCollector(config, connector=mock_connector,
                                 max_workers=opts["max_workers"])

    if opts["config_file"]:
        config = load_config(opts["config_file"])
    else:
        config = single_device_config(opts["device"], opts["address"], opts["user"],
                                      opts["password"], opts["device_port"])

    config = dataclasses.replace(config, features=config.features.merged(**flags))
    log.info("enabled features: %s", ", ".join(config.features.enabled()) or "none")
    return MikrotikCollector(
        config,
        timeout=opts["timeout"],
        tls=opts["tls"],
        insecure=opts["insecure"],
        max_workers=opts["max_workers"],
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="mikrotik-exporter")
@click.option("--config-file", type=click.Path(dir_okay=False), default=None,
              help="YAML file with devices and features")
@click.option("--device", default=None, help="Single device name")
@click.option("--address", default=None, help="Single device address")
@click.option("--user", default=None, help="Single device API user")
@click.option("--password", default=None, help="Single device API password")
@click.option("--device-port", type=int, default=None,
              help="Single device API port (default 8728, 8729 with --tls)")
@click.option("--listen", default="", help="Address to listen on (default all interfaces)")
@click.option("--port", default=DEFAULT_PORT, help="Port to serve metrics on")
@click.option("--path", "metrics_path", default=DEFAULT_PATH, help="Path to serve metrics on")
@click.option("--timeout", default=DEFAULT_TIMEOUT, help="Dial timeout in seconds")
@click.option("--tls", is_flag=True, default=False, help="Use TLS (api-ssl) to talk to devices")
@click.option("--insecure", is_flag=True, default=False, help="Skip TLS certificate verification")
@click.option("--max-workers", type=int, default=None,
              help="Cap on devices scraped in parallel (default one thread per device)")
@click.option("--mock", is_flag=True, default=False, help="Serve metrics from simulated routers")
@click.option("--log-level", type=click.Choice(["debug", "info", "warning", "error"]),
              default="info", help="Log level")
@click.option("--log-format", type=click.Choice(["plain", "rich"]), default="plain",
              help="Log output format")
@_feature_options
@click.pass_context
def cli(ctx, **opts):
    """Prometheus exporter for MikroTik RouterOS devices."""
    setup_logging(opts["log_level"], opts["log_format"])
    ctx.ensure_object(dict)

    try:
        collector = _build_collector(opts)
    except ConfigError as e:
        click.echo(f"Could not load configuration: {e}", err=True)
        raise SystemExit(EXIT_CONFIG_ERROR)

    ctx.obj["collector"] = collector
    ctx.obj["registry"] = build_registry(collector)

    if ctx.invoked_subcommand is None:
        try:
            serve(ctx.obj["registry"], opts["listen"], opts["port"], opts["metrics_path"])
        except OSError as e:
            click.echo(f"Cannot listen on {opts['listen'] or '0.0.0.0'}:{opts['port']}: {e}", err=True)
            raise SystemExit(1)


@cli.command()
@click.pass_context
def scrape(ctx):
    """Scrape all devices once and print the metrics."""
    sys.stdout.write(generate_latest(ctx.obj["registry"]).decode())


if __name__ == "__main__":
    cli()
