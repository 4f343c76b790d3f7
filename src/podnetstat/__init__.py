"""
podnetstat: per-pod network statistics exporter for Kubernetes nodes.

For every pod on the node that has its own network namespace, the exporter
finds the process anchoring the namespace through the container runtime's
shim state files, reads the namespace's counters from procfs, and serves
them in the Prometheus exposition format.

The package is organized into:
- cri: container id to pid resolution
- netstat: procfs network counter parsing
- collection: per-node collection cycle with per-pod failure isolation
- kubelet: pod listing and node metadata
- metrics: Prometheus rendering and request rate limiting
- server: HTTP endpoints
- config, models, validation: configuration, data types and checks
- cli: command-line entry point

Usage:
    podnetstat --host-mount-path /host --node-name "$NODE_NAME"
"""

from .collection import collect_all_pod_stats, collect_pod, collect_pods
from .cri import resolve_container_pid
from .errors import (
    AmbiguousError,
    CollectionError,
    KubeletError,
    NotFoundError,
    PodNetstatError,
    ReadError,
    ResolveError,
)
from .models import (
    CollectionResult,
    ExporterConfig,
    InterfaceStats,
    NamespaceStats,
    NodeMeta,
    PodInfo,
    PodOutcome,
    PodStatsRecord,
    PodStatus,
)
from .netstat import collect_namespace_stats

__version__ = "1.0.0"

__all__ = [
    "collect_all_pod_stats",
    "collect_pod",
    "collect_pods",
    "resolve_container_pid",
    "collect_namespace_stats",
    # Errors
    "AmbiguousError",
    "CollectionError",
    "KubeletError",
    "NotFoundError",
    "PodNetstatError",
    "ReadError",
    "ResolveError",
    # Models
    "CollectionResult",
    "ExporterConfig",
    "InterfaceStats",
    "NamespaceStats",
    "NodeMeta",
    "PodInfo",
    "PodOutcome",
    "PodStatsRecord",
    "PodStatus",
]
