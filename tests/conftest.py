"""
Pytest configuration and shared fixtures for the podnetstat test suite.

The fixtures build a fake node root filesystem under a temporary directory:
containerd shim state directories with pid files, and procfs network tables
for individual pids.
"""

import sys
from pathlib import Path
from typing import Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from podnetstat.models import ExporterConfig, PodInfo  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Sample kernel tables
# ============================================================================

NET_DEV_HEADER = (
    "Inter-|   Receive                                                |  Transmit\n"
    " face |bytes    packets errs drop fifo frame compressed multicast|"
    "bytes    packets errs drop fifo colls carrier compressed\n"
)

SAMPLE_NET_DEV = NET_DEV_HEADER + (
    "    lo:     500       5    0    0    0     0          0         0"
    "      500       5    0    0    0     0       0          0\n"
    "  eth0:    1000      10    1    2    0     0          0         3"
    "     2000      20    4    5    0     6       0          0\n"
)

SAMPLE_SNMP = (
    "Ip: Forwarding DefaultTTL InReceives\n"
    "Ip: 1 64 12345\n"
    "Tcp: RtoAlgorithm RtoMin RtoMax MaxConn ActiveOpens RetransSegs\n"
    "Tcp: 1 200 120000 -1 42 7\n"
    "Udp: InDatagrams NoPorts InErrors OutDatagrams\n"
    "Udp: 100 2 0 98\n"
)

SAMPLE_NETSTAT = (
    "TcpExt: SyncookiesSent ListenOverflows ListenDrops\n"
    "TcpExt: 0 3 4\n"
)

CONTAINERD_V2_DIR = "var/run/containerd/io.containerd.runtime.v2.task/k8s.io"
CONTAINERD_V1_DIR = "var/run/containerd/io.containerd.runtime.v1.linux/k8s.io"

FULL_ID_A = "a" * 64
FULL_ID_B = "b" * 64


class HostFS:
    """Helpers that populate a fake host root filesystem."""

    def __init__(self, root: Path):
        self.root = root

    def pid_file(self, container_id: str, content: str = "4821\n",
                 layout_dir: str = CONTAINERD_V2_DIR, leaf: str = "init.pid") -> Path:
        path = self.root / layout_dir / container_id / leaf
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def proc_net(self, pid: int, dev: Optional[str] = SAMPLE_NET_DEV,
                 snmp: Optional[str] = SAMPLE_SNMP,
                 netstat: Optional[str] = SAMPLE_NETSTAT) -> Path:
        net = self.root / "proc" / str(pid) / "net"
        net.mkdir(parents=True, exist_ok=True)
        for name, content in (("dev", dev), ("snmp", snmp), ("netstat", netstat)):
            if content is not None:
                (net / name).write_text(content)
        return net


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def host_root(tmp_path):
    """An empty directory standing in for the host mount path."""
    root = tmp_path / "host"
    root.mkdir()
    return root


@pytest.fixture
def host_fs(host_root):
    """Helpers writing runtime state and procfs tables under host_root."""
    return HostFS(host_root)


@pytest.fixture
def exporter_config(host_root):
    """An ExporterConfig pointing at the fake host root."""
    return ExporterConfig(host_mount_path=host_root)


@pytest.fixture
def make_pod():
    """Factory for PodInfo objects."""

    def _make_pod(name: str, container_id: str = "", host_network: bool = False,
                  namespace: str = "default") -> PodInfo:
        container_ids = (container_id,) if container_id else ()
        return PodInfo(
            name=name,
            namespace=namespace,
            host_network=host_network,
            container_ids=container_ids,
        )

    return _make_pod
