"""
HTTP server exposing /metrics and /healthz.
"""

from .app import (
    ExporterHTTPServer,
    ExporterRequestHandler,
    ExporterServer,
    address_family_for,
    create_server,
)

__all__ = [
    "ExporterHTTPServer",
    "ExporterRequestHandler",
    "ExporterServer",
    "address_family_for",
    "create_server",
]
