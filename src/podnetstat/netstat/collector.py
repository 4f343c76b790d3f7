"""
Network namespace statistics collection.

Reads a process's network namespace counters through the host's procfs,
reached via the host mount prefix. All processes of a pod share one network
namespace, so any pid inside it yields the pod's counters.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from ..errors import ReadError
from ..models.stats import NamespaceStats
from .parsers import parse_net_dev, parse_protocol_counters

logger = logging.getLogger(__name__)

NET_DEV = "dev"
# Protocol counter tables; optional, not every kernel exposes all of them.
PROTOCOL_TABLES = ("snmp", "netstat")


def net_dir(host_mount_path: Union[str, Path], pid: int) -> Path:
    """Return the procfs net directory of a process under the host mount."""
    return Path(host_mount_path) / "proc" / str(pid) / "net"


def _read_table(path: Path, pid: int, required: bool) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except FileNotFoundError as e:
        if required:
            raise ReadError(path, ReadError.UNREADABLE, str(e), pid=pid, cause=e) from e
        logger.debug(f"pid {pid}: {path} not present, skipping")
        return None
    except OSError as e:
        raise ReadError(path, ReadError.UNREADABLE, str(e), pid=pid, cause=e) from e


def collect_namespace_stats(host_mount_path: Union[str, Path], pid: int) -> NamespaceStats:
    """
    Collect the network counters of the namespace `pid` belongs to.

    Args:
        host_mount_path: Where the node's root filesystem is mounted.
        pid: A process inside the target network namespace.

    Returns:
        A NamespaceStats snapshot with every interface of net/dev and the
        protocol counters of net/snmp and net/netstat.

    Raises:
        ReadError: If net/dev is missing or any table cannot be read.
    """
    directory = net_dir(host_mount_path, pid)
    skipped = 0

    dev_path = directory / NET_DEV
    dev_result = parse_net_dev(_read_table(dev_path, pid, required=True))
    if dev_result.skipped:
        skipped += len(dev_result.skipped)
        logger.warning(
            f"pid {pid}: skipped {len(dev_result.skipped)} malformed line(s) in {dev_path}"
        )

    protocols: Dict[str, Dict[str, int]] = {}
    for table in PROTOCOL_TABLES:
        path = directory / table
        content = _read_table(path, pid, required=False)
        if content is None:
            continue
        result = parse_protocol_counters(content)
        if result.skipped:
            skipped += len(result.skipped)
            logger.warning(
                f"pid {pid}: skipped {len(result.skipped)} malformed line(s) in {path}"
            )
        for protocol, counters in result.values.items():
            protocols.setdefault(protocol, {}).update(counters)

    logger.debug(
        f"pid {pid}: collected {len(dev_result.values)} interface(s), "
        f"{len(protocols)} protocol table(s)"
    )
    return NamespaceStats(
        interfaces=dev_result.values,
        protocols=protocols,
        skipped_lines=skipped,
    )

