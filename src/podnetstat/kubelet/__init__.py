"""
Kubelet pod listing and Kubernetes node metadata.
"""

from .client import POD_LIST_API_ENDPOINT, KubeletClient
from .node import (
    NODE_LABEL_REGION_KEYS,
    NODE_LABEL_ZONE_KEYS,
    get_node_meta,
    node_meta_from_labels,
)

__all__ = [
    "POD_LIST_API_ENDPOINT",
    "KubeletClient",
    "NODE_LABEL_REGION_KEYS",
    "NODE_LABEL_ZONE_KEYS",
    "get_node_meta",
    "node_meta_from_labels",
]
