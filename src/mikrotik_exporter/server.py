"""
HTTP endpoints: the metrics path, /healthz and an index page.

Each request to the metrics path runs one full scrape through the
registry, so scrape frequency is whatever Prometheus asks for.
"""

from __future__ import annotations

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

log = logging.getLogger(__name__)

DEFAULT_PORT = 9436
DEFAULT_PATH = "/metrics"

INDEX_PAGE = """<html>
<head><title>Mikrotik Exporter</title></head>
<body>
<h1>Mikrotik Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def make_handler(registry: CollectorRegistry, metrics_path: str = DEFAULT_PATH):
    class _ExporterHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            path = urlparse(self.path).path
            if path == metrics_path:
                self._reply(200, generate_latest(registry), CONTENT_TYPE_LATEST)
            elif path == "/healthz":
                self._reply(200, b"ok", "text/plain; charset=utf-8")
            elif path == "/":
                body = INDEX_PAGE.format(path=metrics_path).encode()
                self._reply(200, body, "text/html; charset=utf-8")
            else:
                self._reply(404, b"not found\n", "text/plain; charset=utf-8")

        def _reply(self, status: int, body: bytes, content_type: str):
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            log.debug("%s %s", self.address_string(), format % args)

    return _ExporterHandler


def make_server(registry: CollectorRegistry, host: str = "",
                port: int = DEFAULT_PORT, metrics_path: str = DEFAULT_PATH) -> ThreadingHTTPServer:
    server = ThreadingHTTPServer((host, port), make_handler(registry, metrics_path))
    server.daemon_threads = True
    return server


def serve(registry: CollectorRegistry, host: str = "", port: int = DEFAULT_PORT,
          metrics_path: str = DEFAULT_PATH):
    """Run the exporter until interrupted. Raises OSError if the port can't be bound."""
    server = make_server(registry, host, port, metrics_path)
    log.info("listening on %s:%d, metrics at %s", host or "0.0.0.0", port, metrics_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    log.info("server stopped")
