"""
Configuration data models.

The exporter is configured once at startup; the resulting ExporterConfig is
passed explicitly to every component that needs it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class KubeletConfig:
    """
    Options for reaching the kubelet and the Kubernetes API.
    """

    # Port of the kubelet's authenticated API.
    api_port: int = 10250
    # Kubelet host, used when node_name is empty.
    api_host: str = "localhost"
    # Skip TLS verification of the kubelet's serving certificate.
    insecure_skip_verify: bool = False
    # Name of the node this exporter runs on (downward API).
    node_name: str = ""
    # Timeout in seconds for a single kubelet request.
    timeout: float = 10.0


@dataclass
class MetricsConfig:
    """
    Presentation options applied when rendering the scrape response.
    """

    # Interface names dropped from the output (e.g. ["lo"]).
    exclude_interfaces: List[str] = field(default_factory=list)
    # "Protocol.Counter" entries to export; empty exports every counter.
    protocol_counters: List[str] = field(default_factory=list)


@dataclass
class ExporterConfig:
    """
    The root configuration object of the exporter.
    """

    log_level: str = "info"
    # /metrics requests served per second.
    rate_limit: float = 3.0
    # Token bucket burst size for the /metrics rate limiter.
    rate_burst: int = 5
    bind_host: str = ""
    bind_port: int = 8080
    # Where the node's root filesystem is mounted inside the exporter container.
    host_mount_path: Path = Path("/host")
    # containerd's runtime state directory on the node.
    containerd_state_dir: str = "/var/run/containerd"
    # Workers for per-pod collection; 1 collects sequentially.
    max_workers: int = 1
    # Abort startup when node metadata cannot be resolved.
    require_node_meta: bool = True
    kubelet: KubeletConfig = field(default_factory=KubeletConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    @property
    def bind_address(self) -> str:
        return f"{self.bind_host}:{self.bind_port}"
