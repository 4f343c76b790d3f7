"""
HTTP surface of the exporter.

- GET /healthz: liveness, always "OK".
- GET /metrics: rate limited; runs one collection cycle and renders it.

Requests are served on separate threads. Shutdown stops accepting new
connections and waits for in-flight requests before returning.
"""

import logging
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Optional, Tuple

from ..collection import PodLister, collect_all_pod_stats
from ..errors import CollectionError
from ..metrics import CONTENT_TYPE_LATEST, TokenBucket, render_collection, render_error
from ..models.config import ExporterConfig
from ..models.pods import CollectionResult
from ..models.stats import NodeMeta

logger = logging.getLogger(__name__)

CycleRunner = Callable[[PodLister, ExporterConfig], CollectionResult]


def address_family_for(host: str) -> socket.AddressFamily:
    """IPv6 literals (they contain a colon) need an AF_INET6 listener."""
    return socket.AF_INET6 if ":" in host else socket.AF_INET


class ExporterHTTPServer(ThreadingHTTPServer):
    """Threading HTTP server carrying the exporter's request context."""

    # Join request threads on server_close() so in-flight scrapes complete.
    daemon_threads = False
    block_on_close = True

    def __init__(
        self,
        server_address: Tuple[str, int],
        config: ExporterConfig,
        lister: PodLister,
        node_meta: NodeMeta,
        limiter: Optional[TokenBucket] = None,
        cycle_runner: CycleRunner = collect_all_pod_stats,
    ):
        self.config = config
        self.lister = lister
        self.node_meta = node_meta
        self.limiter = limiter or TokenBucket(config.rate_limit, config.rate_burst)
        self.cycle_runner = cycle_runner
        self.address_family = address_family_for(server_address[0])
        super().__init__(server_address, ExporterRequestHandler)


class ExporterRequestHandler(BaseHTTPRequestHandler):
    server: ExporterHTTPServer

    def _send(self, status: int, body: bytes, content_type: str = "text/plain; charset=utf-8") -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:
        path = self.path.split("?", 1)[0]
        if path == "/healthz":
            self._send(200, b"OK\n")
        elif path == "/metrics":
            self._serve_metrics()
        else:
            self._send(404, b"Not Found\n")

    def _serve_metrics(self) -> None:
        if not self.server.limiter.allow():
            self._send(429, b"Too Many Requests\n")
            return

        try:
            result = self.server.cycle_runner(self.server.lister, self.server.config)
        except CollectionError as e:
            logger.error(str(e))
            self._send(500, render_error(e))
            return
        except Exception as e:
            logger.exception(f"Unexpected error during collection: {e}")
            self._send(500, render_error(e))
            return

        try:
            body = render_collection(result, self.server.node_meta, self.server.config.metrics)
        except Exception as e:
            logger.exception(f"Unexpected error rendering metrics: {e}")
            self._send(500, render_error(e))
            return
        self._send(200, body, CONTENT_TYPE_LATEST)

    def log_message(self, format: str, *args) -> None:
        logger.debug(f"{self.address_string()} - {format % args}")


class ExporterServer:
    """
    Runs an ExporterHTTPServer on a background thread.
    """

    def __init__(self, httpd: ExporterHTTPServer):
        self.httpd = httpd
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        host, port = self.httpd.server_address[:2]
        return host, port

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Server already started")
        self._thread = threading.Thread(
            target=self.httpd.serve_forever, name="ExporterHTTP", daemon=True
        )
        self._thread.start()
        host, port = self.address
        logger.info(f"Serving HTTP at {host}:{port}")

    def shutdown(self) -> None:
        """Stop accepting requests and wait for in-flight requests to finish."""
        if self._thread is None:
            return
        self.httpd.shutdown()
        self.httpd.server_close()
        self._thread.join()
        self._thread = None
        logger.info("HTTP server stopped")


def create_server(
    config: ExporterConfig,
    lister: PodLister,
    node_meta: NodeMeta,
    limiter: Optional[TokenBucket] = None,
) -> ExporterServer:
    """Bind the HTTP server to the configured address."""
    httpd = ExporterHTTPServer(
        (config.bind_host, config.bind_port), config, lister, node_meta, limiter
    )
    return ExporterServer(httpd)
