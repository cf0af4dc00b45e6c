"""HTTP listener serving the landing page and the metrics path."""
import logging
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from typing import Optional, Tuple

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from .config import ExporterConfig

log = logging.getLogger("lightning-exporter.daemon")

LANDING_PAGE = """<html>
<head><title>Lightning Exporter</title></head>
<body>
<h1>Lightning Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` (host may be empty) into a bind tuple."""
    host, sep, port = address.rpartition(':')
    if not sep:
        raise ValueError(f"Invalid listen address {address!r}, expected host:port")
    host = host.strip('[]')
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {address!r}")


class ExporterDaemon:
    def __init__(self, config: ExporterConfig, registry: CollectorRegistry):
        self.config = config
        self.registry = registry
        self.httpd: Optional[ThreadingHTTPServer] = None
        self.serving = False

    def bind(self) -> ThreadingHTTPServer:
        """Bind the listen address. Failing to bind is fatal for the process."""
        addr = parse_listen_address(self.config.listen_address)
        self.httpd = ThreadingHTTPServer(addr, self._make_handler())
        self.httpd.daemon_threads = True
        return self.httpd

    @property
    def server_address(self) -> Tuple[str, int]:
        return self.httpd.server_address[:2]

    def start(self):
        """Bind and serve until interrupted."""
        httpd = self.httpd or self.bind()
        host, port = self.server_address
        log.info(f"Starting HTTP server on {host}:{port}, metrics at {self.config.metrics_path}")
        self.serving = True
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            log.info("Shutting down...")
        finally:
            self.stop()

    def stop(self):
        """Stop the server and release the socket."""
        httpd, self.httpd = self.httpd, None
        if httpd is None:
            return
        if self.serving:
            self.serving = False
            httpd.shutdown()
        httpd.server_close()

    def render_metrics(self) -> bytes:
        return generate_latest(self.registry)

    def _make_handler(self):
        """Create a request handler with access to this daemon instance."""
        daemon = self

        class RequestHandler(BaseHTTPRequestHandler):
            def do_GET(self):
                path = self.path.split('?', 1)[0]
                if path == daemon.config.metrics_path:
                    self._handle_metrics()
                elif path == '/':
                    self._handle_landing()
                elif path == '/healthz':
                    self._handle_healthz()
                else:
                    self._handle_not_found()

            def _set_headers(self, status_code=200, content_type="text/plain; charset=utf-8", length=None):
                self.send_response(status_code)
                self.send_header("Content-Type", content_type)
                self.send_header("Cache-Control", "no-store")
                if length is not None:
                    self.send_header("Content-Length", str(length))
                self.end_headers()

            def _handle_metrics(self):
                try:
                    data = daemon.render_metrics()
                except Exception as e:
                    log.error(f"Failed to render metrics: {e}", exc_info=True)
                    body = f"error rendering metrics: {e}\n".encode('utf-8')
                    self._set_headers(500, length=len(body))
                    self.wfile.write(body)
                    return
                self._set_headers(content_type=CONTENT_TYPE_LATEST, length=len(data))
                self.wfile.write(data)

            def _handle_landing(self):
                body = LANDING_PAGE.format(metrics_path=daemon.config.metrics_path).encode('utf-8')
                self._set_headers(content_type="text/html; charset=utf-8", length=len(body))
                self.wfile.write(body)

            def _handle_healthz(self):
                self._set_headers(length=3)
                self.wfile.write(b"ok\n")

            def _handle_not_found(self):
                body = b"404 page not found\n"
                self._set_headers(404, length=len(body))
                self.wfile.write(body)

            def log_message(self, fmt, *args):
                log.debug(f"{self.address_string()} - {fmt % args}")

        return RequestHandler
