"""
Integration tests: a node with containerd shim state and procfs tables,
scraped through the real collection pipeline and HTTP server.
"""

import pytest
import requests
from prometheus_client.parser import text_string_to_metric_families

from conftest import NET_DEV_HEADER, SAMPLE_NET_DEV
from podnetstat.collection import collect_all_pod_stats
from podnetstat.metrics import TokenBucket
from podnetstat.models import ExporterConfig, NodeMeta, PodStatus
from podnetstat.server import create_server

CONTAINER_ID = "abc123" + "0" * 58

SIMPLE_NET_DEV = NET_DEV_HEADER + (
    "  eth0:    1000      10    0    0    0     0          0         0"
    "     2000      20    0    0    0     0       0          0\n"
)


class ListLister:
    """Lister over a mutable list of pods."""

    def __init__(self, pods):
        self.pods = pods

    def get_pod_list(self):
        return list(self.pods)


def _rx_bytes(body: str):
    values = {}
    for family in text_string_to_metric_families(body):
        for sample in family.samples:
            if sample.name == "pod_netstat_rx_bytes_total":
                values[(sample.labels["pod"], sample.labels["interface"])] = sample.value
    return values


@pytest.mark.integration
class TestCollectionPipeline:

    def test_single_pod_scenario(self, host_fs, make_pod, exporter_config):
        host_fs.pid_file(CONTAINER_ID, "4821\n")
        host_fs.proc_net(4821, dev=SIMPLE_NET_DEV, snmp=None, netstat=None)
        lister = ListLister([make_pod("web", f"containerd://{CONTAINER_ID}")])

        result = collect_all_pod_stats(lister, exporter_config)

        assert len(result.records) == 1
        record = result.records[0]
        assert result.outcomes[0].pid == 4821
        assert set(record.stats.interfaces) == {"eth0"}
        assert record.stats.interfaces["eth0"].rx_bytes == 1000
        assert record.stats.interfaces["eth0"].tx_bytes == 2000

    def test_mixed_node(self, host_fs, make_pod, exporter_config):
        host_fs.pid_file("a" * 64, "100\n")
        host_fs.proc_net(100)
        host_fs.pid_file("b" * 64, "200\n", layout_dir="var/run/containerd/io.containerd.runtime.v1.linux/k8s.io")
        host_fs.proc_net(200)
        host_fs.pid_file("d" * 64, "300\n")  # process exited, no procfs entry
        lister = ListLister([
            make_pod("v2-pod", "containerd://" + "a" * 64),
            make_pod("missing", "containerd://" + "c" * 64),
            make_pod("v1-pod", "containerd://" + "b" * 64),
            make_pod("agent", "containerd://" + "a" * 64, host_network=True),
            make_pod("exited", "containerd://" + "d" * 64),
            make_pod("pending"),
        ])

        result = collect_all_pod_stats(lister, exporter_config)

        assert [record.name for record in result.records] == ["v2-pod", "v1-pod"]
        assert result.count_by_status() == {
            PodStatus.SUCCEEDED: 2,
            PodStatus.SKIPPED: 1,
            PodStatus.FAILED: 3,
        }

    def test_cycles_are_independent(self, host_fs, make_pod, exporter_config):
        host_fs.pid_file("a" * 64, "100\n")
        host_fs.proc_net(100)
        host_fs.pid_file("b" * 64, "200\n")
        host_fs.proc_net(200)
        pods = [make_pod("first", "containerd://" + "a" * 64)]
        lister = ListLister(pods)

        first = collect_all_pod_stats(lister, exporter_config)
        pods[:] = [make_pod("second", "containerd://" + "b" * 64)]
        second = collect_all_pod_stats(lister, exporter_config)

        assert [record.name for record in first.records] == ["first"]
        assert [record.name for record in second.records] == ["second"]


@pytest.mark.integration
class TestScrape:

    def test_scrape_serves_current_counters(self, host_fs, host_root, make_pod):
        host_fs.pid_file(CONTAINER_ID, "4821\n")
        net = host_fs.proc_net(4821, dev=SIMPLE_NET_DEV)
        config = ExporterConfig(bind_host="127.0.0.1", bind_port=0, host_mount_path=host_root)
        lister = ListLister([make_pod("web", f"containerd://{CONTAINER_ID}", namespace="shop")])
        server = create_server(
            config, lister, NodeMeta(name="node-a", region="r", zone="z"),
            limiter=TokenBucket(rate=1000, burst=1000),
        )
        server.start()
        host, port = server.address
        try:
            with requests.Session() as session:
                session.trust_env = False
                first = session.get(f"http://{host}:{port}/metrics", timeout=5)
                (net / "dev").write_text(SAMPLE_NET_DEV)
                second = session.get(f"http://{host}:{port}/metrics", timeout=5)
        finally:
            server.shutdown()

        assert first.status_code == 200
        assert _rx_bytes(first.text) == {("web", "eth0"): 1000}
        assert _rx_bytes(second.text) == {("web", "eth0"): 1000, ("web", "lo"): 500}
        assert 'namespace="shop"' in first.text
        assert 'region="r"' in first.text

    def test_pod_list_failure_is_500(self, host_root):
        class BrokenLister:
            def get_pod_list(self):
                raise ConnectionError("kubelet unreachable")

        config = ExporterConfig(bind_host="127.0.0.1", bind_port=0, host_mount_path=host_root)
        server = create_server(config, BrokenLister(), NodeMeta(name="node-a"))
        server.start()
        host, port = server.address
        try:
            with requests.Session() as session:
                session.trust_env = False
                response = session.get(f"http://{host}:{port}/metrics", timeout=5)
        finally:
            server.shutdown()

        assert response.status_code == 500
        assert "error getting pod list" in response.text
