"""
Collection orchestration across all pods of the node.

Each pod goes through a small state machine:

    FilterCheck -> [skipped: host network]
                | ExtractContainerRef -> [failed: no containers]
                | ResolveProcess      -> [failed: resolve error]
                | CollectStats        -> [failed: collect error]
                | [succeeded]

Every pod ends in a PodOutcome. Resolver and collector errors are recorded
on the outcome and never reach other pods; only a failure to list pods
aborts the cycle.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Protocol, Sequence, Union

from ..cri import DEFAULT_CONTAINERD_STATE_DIR, resolve_container_pid
from ..errors import CollectionError, PodNetstatError, ReadError, ResolveError
from ..models.config import ExporterConfig
from ..models.pods import CollectionResult, FailureReason, PodInfo, PodOutcome, PodStatus
from ..models.stats import NamespaceStats
from ..netstat import collect_namespace_stats

logger = logging.getLogger(__name__)

PidResolver = Callable[[Union[str, Path], str, str], int]
StatsCollector = Callable[[Union[str, Path], int], NamespaceStats]


class PodLister(Protocol):
    """Anything that can list the pods of this node."""

    def get_pod_list(self) -> List[PodInfo]:
        ...


def collect_pod(
    pod: PodInfo,
    host_mount_path: Union[str, Path],
    state_root: str = DEFAULT_CONTAINERD_STATE_DIR,
    resolver: PidResolver = resolve_container_pid,
    collector: StatsCollector = collect_namespace_stats,
) -> PodOutcome:
    """
    Collect the network statistics of a single pod.

    All containers of a pod share one network namespace, so the first
    container's process is enough.

    Returns:
        The pod's outcome; resolver and collector errors are captured on it.
    """
    if pod.host_network:
        logger.debug(f"Pod {pod.name} has hostNetwork: true, cannot fetch per-pod network metrics")
        return PodOutcome(pod=pod, status=PodStatus.SKIPPED, reason=FailureReason.HOST_NETWORK)

    if not pod.container_ids or not pod.container_ids[0]:
        return PodOutcome(
            pod=pod,
            status=PodStatus.FAILED,
            reason=FailureReason.NO_CONTAINERS,
            error=CollectionError("no containers in pod"),
        )

    container = pod.container_ids[0]
    try:
        pid = resolver(host_mount_path, container, state_root)
    except (ResolveError, ReadError) as e:
        return PodOutcome(
            pod=pod,
            status=PodStatus.FAILED,
            reason=FailureReason.RESOLVE_ERROR,
            error=e,
            container_id=container,
        )

    logger.debug(f"Container {container} of pod {pod.name} has PID {pid}")
    try:
        stats = collector(host_mount_path, pid)
    except PodNetstatError as e:
        return PodOutcome(
            pod=pod,
            status=PodStatus.FAILED,
            reason=FailureReason.COLLECT_ERROR,
            error=e,
            container_id=container,
            pid=pid,
        )

    return PodOutcome(
        pod=pod,
        status=PodStatus.SUCCEEDED,
        stats=stats,
        container_id=container,
        pid=pid,
    )


def _log_outcome(outcome: PodOutcome) -> None:
    if outcome.status is not PodStatus.FAILED:
        return
    if outcome.reason is FailureReason.RESOLVE_ERROR:
        message = f"error getting pid for container {outcome.container_id}: {outcome.error}"
    else:
        message = str(outcome.error)
    logger.warning(
        f"Could not get stats for pod {outcome.pod.namespace}/{outcome.pod.name}: {message}"
    )


def collect_pods(
    pods: Sequence[PodInfo],
    host_mount_path: Union[str, Path],
    state_root: str = DEFAULT_CONTAINERD_STATE_DIR,
    max_workers: int = 1,
    resolver: PidResolver = resolve_container_pid,
    collector: StatsCollector = collect_namespace_stats,
) -> CollectionResult:
    """
    Collect statistics for every pod, preserving input order.

    Args:
        pods: Pods to process.
        host_mount_path: Where the node's root filesystem is mounted.
        state_root: containerd's state directory on the node.
        max_workers: Pods processed concurrently; 1 processes them sequentially.

    Returns:
        A CollectionResult with one outcome per input pod.
    """
    started = time.monotonic()

    def _collect(pod: PodInfo) -> PodOutcome:
        return collect_pod(pod, host_mount_path, state_root, resolver, collector)

    if max_workers > 1 and len(pods) > 1:
        with ThreadPoolExecutor(
            max_workers=min(max_workers, len(pods)), thread_name_prefix="PodCollector"
        ) as executor:
            # map() yields results in submission order.
            outcomes = list(executor.map(_collect, pods))
    else:
        outcomes = [_collect(pod) for pod in pods]

    for outcome in outcomes:
        _log_outcome(outcome)

    result = CollectionResult(outcomes=outcomes, duration_seconds=time.monotonic() - started)
    counts = result.count_by_status()
    logger.debug(
        f"Collected {counts[PodStatus.SUCCEEDED]} pod(s), skipped {counts[PodStatus.SKIPPED]}, "
        f"failed {counts[PodStatus.FAILED]} in {result.duration_seconds:.3f}s"
    )
    return result


def collect_all_pod_stats(lister: PodLister, config: ExporterConfig) -> CollectionResult:
    """
    Run one full collection cycle for the node.

    Raises:
        CollectionError: If the pod list cannot be obtained.
    """
    try:
        pods = lister.get_pod_list()
    except Exception as e:
        raise CollectionError(f"error getting pod list: {e}") from e

    return collect_pods(
        pods,
        config.host_mount_path,
        state_root=config.containerd_state_dir,
        max_workers=config.max_workers,
    )
