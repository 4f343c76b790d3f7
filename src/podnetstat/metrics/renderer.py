"""
Prometheus rendering of per-pod network statistics.

A fresh registry is built for every scrape from the cycle's records, so the
output always reflects exactly one collection cycle.
"""

import logging
from typing import Dict, Iterable, Iterator, Optional, Sequence

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.registry import Collector

from ..models.config import MetricsConfig
from ..models.pods import CollectionResult, PodStatus
from ..models.stats import InterfaceStats, NodeMeta, PodStatsRecord

logger = logging.getLogger(__name__)

METRIC_PREFIX = "pod_netstat"
POD_LABELS = ["namespace", "pod", "node", "region", "zone"]

_INTERFACE_DESCRIPTIONS = {
    "rx_bytes": "Bytes received by the pod interface",
    "rx_packets": "Packets received by the pod interface",
    "rx_errors": "Receive errors on the pod interface",
    "rx_dropped": "Received packets dropped on the pod interface",
    "rx_fifo": "Receive FIFO buffer errors on the pod interface",
    "rx_frame": "Receive framing errors on the pod interface",
    "rx_compressed": "Compressed packets received by the pod interface",
    "rx_multicast": "Multicast frames received by the pod interface",
    "tx_bytes": "Bytes transmitted by the pod interface",
    "tx_packets": "Packets transmitted by the pod interface",
    "tx_errors": "Transmit errors on the pod interface",
    "tx_dropped": "Transmitted packets dropped on the pod interface",
    "tx_fifo": "Transmit FIFO buffer errors on the pod interface",
    "tx_collisions": "Collisions detected on the pod interface",
    "tx_carrier": "Carrier losses on the pod interface",
    "tx_compressed": "Compressed packets transmitted by the pod interface",
}


class PodNetstatCollector(Collector):
    """
    prometheus_client collector over one cycle's pod records.

    Args:
        records: Succeeded pods of the cycle, in collection order.
        node_meta: Node identity added as labels to every sample.
        config: Interface exclusion and protocol counter selection.
        status_counts: Optional pod counts per outcome status.
        duration_seconds: Optional duration of the collection cycle.
    """

    def __init__(
        self,
        records: Sequence[PodStatsRecord],
        node_meta: NodeMeta,
        config: Optional[MetricsConfig] = None,
        status_counts: Optional[Dict[PodStatus, int]] = None,
        duration_seconds: Optional[float] = None,
    ):
        self.records = list(records)
        self.node_meta = node_meta
        self.config = config or MetricsConfig()
        self.status_counts = status_counts
        self.duration_seconds = duration_seconds
        self._excluded = frozenset(self.config.exclude_interfaces)
        self._protocol_filter = frozenset(self.config.protocol_counters)

    def _pod_labels(self, record: PodStatsRecord) -> list:
        meta = self.node_meta
        return [record.namespace, record.name, meta.name, meta.region, meta.zone]

    def _wanted_counter(self, protocol: str, counter: str) -> bool:
        return not self._protocol_filter or f"{protocol}.{counter}" in self._protocol_filter

    def collect(self) -> Iterator:
        families = {
            name: CounterMetricFamily(
                f"{METRIC_PREFIX}_{name}",
                _INTERFACE_DESCRIPTIONS.get(name, name),
                labels=POD_LABELS + ["interface"],
            )
            for name in InterfaceStats.counter_names()
        }
        # net/snmp mixes true counters with gauges (Tcp CurrEstab, Ip Forwarding).
        protocol_family = GaugeMetricFamily(
            f"{METRIC_PREFIX}_protocol_stat",
            "Protocol statistics of the pod network namespace from net/snmp and net/netstat",
            labels=POD_LABELS + ["protocol", "counter"],
        )

        for record in self.records:
            pod_labels = self._pod_labels(record)
            for interface, counters in sorted(record.stats.interfaces.items()):
                if interface in self._excluded:
                    continue
                for name, value in counters.as_dict().items():
                    families[name].add_metric(pod_labels + [interface], value)
            for protocol, counters in sorted(record.stats.protocols.items()):
                for counter, value in sorted(counters.items()):
                    if self._wanted_counter(protocol, counter):
                        protocol_family.add_metric(pod_labels + [protocol, counter], value)

        yield from families.values()
        yield protocol_family

        if self.status_counts is not None:
            pods = GaugeMetricFamily(
                f"{METRIC_PREFIX}_pods",
                "Pods seen in the last collection cycle by outcome",
                labels=["node", "status"],
            )
            for status, count in self.status_counts.items():
                pods.add_metric([self.node_meta.name, status.value], count)
            yield pods

        if self.duration_seconds is not None:
            duration = GaugeMetricFamily(
                f"{METRIC_PREFIX}_collection_duration_seconds",
                "Duration of the last collection cycle",
                labels=["node"],
            )
            duration.add_metric([self.node_meta.name], self.duration_seconds)
            yield duration


def render_metrics(
    records: Iterable[PodStatsRecord],
    node_meta: NodeMeta,
    config: Optional[MetricsConfig] = None,
    status_counts: Optional[Dict[PodStatus, int]] = None,
    duration_seconds: Optional[float] = None,
) -> bytes:
    """Render pod records in the Prometheus text exposition format."""
    registry = CollectorRegistry(auto_describe=False)
    registry.register(
        PodNetstatCollector(list(records), node_meta, config, status_counts, duration_seconds)
    )
    return generate_latest(registry)


def render_collection(
    result: CollectionResult, node_meta: NodeMeta, config: Optional[MetricsConfig] = None
) -> bytes:
    """Render a collection cycle including the exporter's own cycle metrics."""
    return render_metrics(
        result.records,
        node_meta,
        config,
        status_counts=result.count_by_status(),
        duration_seconds=result.duration_seconds,
    )


def render_error(error: Exception) -> bytes:
    """Body of the response served when a collection cycle fails."""
    return f"collection failed: {error}\n".encode("utf-8")


__all__ = [
    "CONTENT_TYPE_LATEST",
    "PodNetstatCollector",
    "render_collection",
    "render_error",
    "render_metrics",
]
