"""
Node metadata resolution.
"""

import logging
from typing import Dict, Sequence

from ..errors import KubeletError
from ..models.stats import NodeMeta
from .client import KubeletClient

logger = logging.getLogger(__name__)

# Legacy beta labels first, then the GA topology labels.
NODE_LABEL_REGION_KEYS = (
    "failure-domain.beta.kubernetes.io/region",
    "topology.kubernetes.io/region",
)
NODE_LABEL_ZONE_KEYS = (
    "failure-domain.beta.kubernetes.io/zone",
    "topology.kubernetes.io/zone",
)


def _first_label(labels: Dict[str, str], keys: Sequence[str], what: str) -> str:
    for key in keys:
        if key in labels:
            return labels[key]
    logger.warning(f"couldn't find the node {what} with label keys {list(keys)}")
    return ""


def node_meta_from_labels(name: str, labels: Dict[str, str]) -> NodeMeta:
    """Build NodeMeta from node labels; missing region or zone become empty."""
    logger.debug(f"getting node region and zone from node labels: {labels}")
    return NodeMeta(
        name=name,
        region=_first_label(labels, NODE_LABEL_REGION_KEYS, "region"),
        zone=_first_label(labels, NODE_LABEL_ZONE_KEYS, "zone"),
    )


def get_node_meta(client: KubeletClient, required: bool = True) -> NodeMeta:
    """
    Resolve this node's metadata once at startup.

    Args:
        client: Client used for the node lookup.
        required: When False a failed lookup degrades to a NodeMeta holding
                  only the configured node name.

    Raises:
        KubeletError: If the lookup fails and `required` is True.
    """
    node_name = client.config.node_name
    try:
        labels = client.get_node_labels()
    except KubeletError as e:
        if required:
            logger.error(f"get node {node_name or '<unset>'} failed: {e}")
            raise
        logger.warning(f"get node {node_name or '<unset>'} failed, continuing without node labels: {e}")
        return NodeMeta(name=node_name)

    meta = node_meta_from_labels(node_name, labels)
    logger.info(f"get node metadata {meta}")
    return meta
