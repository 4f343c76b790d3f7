"""
Pod descriptors and per-pod collection outcomes.

PodInfo is the minimal view of a pod the collector needs from the pod lister.
PodOutcome is the typed result of processing one pod, and CollectionResult
aggregates the outcomes of a whole cycle in input order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .stats import NamespaceStats, PodStatsRecord


@dataclass(frozen=True)
class PodInfo:
    """
    A pod as reported by the kubelet.

    Attributes:
        name: Pod name.
        namespace: Pod namespace.
        host_network: True when the pod shares the node's network namespace.
        container_ids: Runtime-qualified ids of the pod's container statuses,
                       in status order. Empty while the pod is starting.
    """

    name: str
    namespace: str
    host_network: bool = False
    container_ids: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, pod: Dict[str, Any]) -> "PodInfo":
        """Build a PodInfo from a Kubernetes Pod object in JSON form."""
        metadata = pod.get("metadata") or {}
        spec = pod.get("spec") or {}
        status = pod.get("status") or {}
        container_ids = tuple(
            cs.get("containerID", "")
            for cs in status.get("containerStatuses") or []
        )
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            host_network=bool(spec.get("hostNetwork", False)),
            container_ids=container_ids,
        )


class PodStatus(Enum):
    """Terminal states of the per-pod collection state machine."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureReason(Enum):
    """Why a pod ended in a non-successful state."""

    HOST_NETWORK = "host_network"
    NO_CONTAINERS = "no_containers"
    RESOLVE_ERROR = "resolve_error"
    COLLECT_ERROR = "collect_error"


@dataclass(frozen=True)
class PodOutcome:
    """Result of collecting statistics for a single pod."""

    pod: PodInfo
    status: PodStatus
    stats: Optional[NamespaceStats] = None
    reason: Optional[FailureReason] = None
    error: Optional[Exception] = None
    container_id: str = ""
    pid: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status is PodStatus.SUCCEEDED

    def to_record(self) -> PodStatsRecord:
        if self.stats is None:
            raise ValueError(f"pod {self.pod.namespace}/{self.pod.name} has no statistics")
        return PodStatsRecord(name=self.pod.name, namespace=self.pod.namespace, stats=self.stats)


@dataclass
class CollectionResult:
    """The ordered outcomes of one collection cycle."""

    outcomes: List[PodOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def records(self) -> List[PodStatsRecord]:
        return [outcome.to_record() for outcome in self.outcomes if outcome.succeeded]

    @property
    def failures(self) -> List[PodOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is PodStatus.FAILED]

    def count_by_status(self) -> Dict[PodStatus, int]:
        counts = {status: 0 for status in PodStatus}
        for outcome in self.outcomes:
            counts[outcome.status] += 1
        return counts
