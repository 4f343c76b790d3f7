"""
Command-line interface for the pod network statistics exporter.

This module provides the main entry point: it loads the configuration,
sets up logging, resolves the node's metadata, serves /metrics until a
termination signal arrives, and then shuts down gracefully.
"""

import argparse
import logging
import signal
import sys
import threading
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import load_config
from ..errors import KubeletError
from ..kubelet import KubeletClient, get_node_meta
from ..server import create_server
from ..validation import ValidationError, handle_cli_error

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# "trace" is accepted for compatibility and maps to DEBUG.
_LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure root logging with the exporter's format."""
    logging.basicConfig(
        level=_LOG_LEVELS[log_level.lower()],
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser. Unset flags stay None so lower layers apply."""
    parser = argparse.ArgumentParser(
        description="Export per-pod network namespace statistics for Prometheus."
    )
    parser.add_argument("--config", type=Path, help="Optional TOML configuration file.")
    parser.add_argument("--log-level", type=str, help="Log level (env LOG_LEVEL, default info).")
    parser.add_argument(
        "--rate-limit", type=float,
        help="The number of /metrics requests served per second (env RATE_LIMIT, default 3).",
    )
    parser.add_argument(
        "--rate-burst", type=int,
        help="The number of /metrics requests allowed in a burst (env RATE_BURST, default 5).",
    )
    parser.add_argument(
        "-p", "--bind-address", type=str,
        help="Address for binding the metrics listener (env BIND_ADDRESS, default :8080).",
    )
    parser.add_argument(
        "--host-mount-path", type=str,
        help="The path where the host filesystem is mounted (env HOST_MOUNT_PATH, default /host).",
    )
    parser.add_argument(
        "--containerd-state-dir", type=str,
        help="containerd state directory on the host (env CONTAINERD_STATE_DIR).",
    )
    parser.add_argument(
        "--max-workers", type=int,
        help="Pods collected concurrently per scrape (env MAX_WORKERS, default 1).",
    )
    parser.add_argument(
        "--require-node-meta", action=argparse.BooleanOptionalAction, default=None,
        help="Exit at startup if node metadata cannot be resolved (env REQUIRE_NODE_META).",
    )
    parser.add_argument(
        "--kubelet-api-port", type=int,
        help="kubelet API listening port (env KUBELET_API_PORT, default 10250).",
    )
    parser.add_argument(
        "--kubelet-api", dest="kubelet_api_host", type=str,
        help="kubelet API hostname (env KUBELET_API_HOST, default localhost).",
    )
    parser.add_argument(
        "--kubelet-api-insecure-skip-verify", action="store_true", default=None,
        help="Skip verification of the kubelet API TLS certificate.",
    )
    parser.add_argument(
        "--kubelet-timeout", type=float,
        help="Timeout in seconds for kubelet requests (env KUBELET_TIMEOUT, default 10).",
    )
    parser.add_argument(
        "--node-name", type=str,
        help="Node name of the exporter pod (env NODE_NAME).",
    )
    parser.add_argument(
        "--exclude-interface", dest="exclude_interfaces", action="append",
        help="Interface left out of the metrics; repeatable (env EXCLUDE_INTERFACES).",
    )
    parser.add_argument(
        "--protocol-counter", dest="protocol_counters", action="append",
        help="Protocol counter to export, e.g. Tcp.RetransSegs; repeatable (env PROTOCOL_COUNTERS).",
    )
    return parser


def cli_overrides(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    """Map parsed arguments onto configuration sections."""
    return {
        "exporter": {
            "log_level": args.log_level,
            "rate_limit": args.rate_limit,
            "rate_burst": args.rate_burst,
            "bind_address": args.bind_address,
            "host_mount_path": args.host_mount_path,
            "containerd_state_dir": args.containerd_state_dir,
            "max_workers": args.max_workers,
            "require_node_meta": args.require_node_meta,
        },
        "kubelet": {
            "api_port": args.kubelet_api_port,
            "api_host": args.kubelet_api_host,
            "insecure_skip_verify": args.kubelet_api_insecure_skip_verify,
            "timeout": args.kubelet_timeout,
            "node_name": args.node_name,
        },
        "metrics": {
            "exclude_interfaces": args.exclude_interfaces,
            "protocol_counters": args.protocol_counters,
        },
    }


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line entry point.

    Raises:
        SystemExit: On configuration errors or startup failures.
    """
    setup_logging("info")
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, cli_overrides(args))
    except (FileNotFoundError, tomllib.TOMLDecodeError, ValidationError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    setup_logging(config.log_level)

    try:
        client = KubeletClient.from_config(config.kubelet)
    except Exception as e:
        handle_cli_error(error=e, context="initializing the kubelet/k8s client", logger=logger)

    try:
        node_meta = get_node_meta(client, required=config.require_node_meta)
    except KubeletError as e:
        handle_cli_error(error=e, context="getting the node metadata", logger=logger)

    try:
        server = create_server(config, client, node_meta)
    except OSError as e:
        handle_cli_error(error=e, context=f"binding {config.bind_address}", logger=logger)

    shutdown_requested = threading.Event()

    def signal_handler(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}. Shutting down.")
        shutdown_requested.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    server.start()
    shutdown_requested.wait()
    server.shutdown()


if __name__ == "__main__":
    main_cli()
