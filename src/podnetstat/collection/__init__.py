"""
Per-node collection cycle: pods in, per-pod statistics out.
"""

from .orchestrator import PodLister, collect_all_pod_stats, collect_pod, collect_pods

__all__ = [
    "PodLister",
    "collect_all_pod_stats",
    "collect_pod",
    "collect_pods",
]
