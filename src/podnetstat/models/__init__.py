"""
Data models and structures for the exporter.

Configuration Models:
- Exporter, kubelet client and metrics presentation settings

Statistics Models:
- Per-interface device counters and per-namespace snapshots
- Per-pod records and node metadata

Pod Models:
- Pod descriptors from the kubelet
- Typed per-pod outcomes and per-cycle results
"""

from .config import ExporterConfig, KubeletConfig, MetricsConfig
from .pods import CollectionResult, FailureReason, PodInfo, PodOutcome, PodStatus
from .stats import InterfaceStats, NamespaceStats, NodeMeta, PodStatsRecord

__all__ = [
    # Configuration
    "ExporterConfig",
    "KubeletConfig",
    "MetricsConfig",
    # Statistics
    "InterfaceStats",
    "NamespaceStats",
    "NodeMeta",
    "PodStatsRecord",
    # Pods
    "CollectionResult",
    "FailureReason",
    "PodInfo",
    "PodOutcome",
    "PodStatus",
]
