"""
Network statistics data models.

This module defines the immutable value types produced by one collection
cycle: per-interface device counters, the per-namespace snapshot that groups
them with protocol counters, and the per-pod record handed to presentation.
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Dict, List, Mapping


@dataclass(frozen=True)
class InterfaceStats:
    """
    Device-level counters of one network interface, as listed in /proc/net/dev.

    Every counter defaults to zero so a column missing from the kernel table
    never fails the record.
    """

    rx_bytes: int = 0
    rx_packets: int = 0
    rx_errors: int = 0
    rx_dropped: int = 0
    rx_fifo: int = 0
    rx_frame: int = 0
    rx_compressed: int = 0
    rx_multicast: int = 0
    tx_bytes: int = 0
    tx_packets: int = 0
    tx_errors: int = 0
    tx_dropped: int = 0
    tx_fifo: int = 0
    tx_collisions: int = 0
    tx_carrier: int = 0
    tx_compressed: int = 0

    @classmethod
    def counter_names(cls) -> List[str]:
        """Return the counter field names in declaration order."""
        return [f.name for f in fields(cls)]

    def as_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in self.counter_names()}


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class NamespaceStats:
    """
    Point-in-time network counters of one network namespace.

    Attributes:
        interfaces: Interface name -> InterfaceStats.
        protocols: Protocol name (e.g. "Tcp", "TcpExt") -> counter name -> value.
        skipped_lines: Number of malformed kernel table lines that were skipped.
    """

    interfaces: Mapping[str, InterfaceStats] = field(default_factory=dict)
    protocols: Mapping[str, Mapping[str, int]] = field(default_factory=dict)
    skipped_lines: int = 0

    def __post_init__(self):
        object.__setattr__(self, "interfaces", _freeze(self.interfaces))
        object.__setattr__(
            self,
            "protocols",
            _freeze({name: _freeze(counters) for name, counters in self.protocols.items()}),
        )

    def protocol_counter(self, protocol: str, counter: str) -> int:
        """Return a protocol counter, or 0 when the kernel does not expose it."""
        return self.protocols.get(protocol, {}).get(counter, 0)

    @property
    def tcp_retransmits(self) -> int:
        return self.protocol_counter("Tcp", "RetransSegs")


@dataclass(frozen=True)
class PodStatsRecord:
    """The statistics of one pod for one collection cycle."""

    name: str
    namespace: str
    stats: NamespaceStats


@dataclass(frozen=True)
class NodeMeta:
    """Node identity, resolved once at startup and read-only afterwards."""

    name: str = ""
    region: str = ""
    zone: str = ""
