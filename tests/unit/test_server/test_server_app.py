"""
Unit tests for the HTTP endpoints.

Servers bind to an ephemeral port on the loopback interface.
"""

import socket
import threading

import pytest
import requests
from prometheus_client.parser import text_string_to_metric_families

from podnetstat.errors import CollectionError
from podnetstat.metrics import TokenBucket
from podnetstat.models import (
    CollectionResult,
    ExporterConfig,
    InterfaceStats,
    NamespaceStats,
    NodeMeta,
    PodInfo,
    PodOutcome,
    PodStatus,
)
from podnetstat.server import ExporterHTTPServer, ExporterServer, address_family_for, create_server


def _get(url, timeout=5):
    # Loopback requests must not go through a proxy from the environment.
    with requests.Session() as session:
        session.trust_env = False
        return session.get(url, timeout=timeout)


class FakeLister:
    def get_pod_list(self):
        return []


def _result():
    stats = NamespaceStats(interfaces={"eth0": InterfaceStats(rx_bytes=1000, tx_bytes=2000)})
    pod = PodInfo("web", "shop", container_ids=("containerd://abc",))
    return CollectionResult(outcomes=[PodOutcome(pod=pod, status=PodStatus.SUCCEEDED, stats=stats)])


@pytest.fixture
def running_server(tmp_path):
    """Start a server with a replaceable cycle runner; yields (server, base_url)."""
    servers = []

    def _start(cycle_runner=None, limiter=None):
        config = ExporterConfig(bind_host="127.0.0.1", bind_port=0, host_mount_path=tmp_path)
        httpd = ExporterHTTPServer(
            (config.bind_host, config.bind_port),
            config,
            FakeLister(),
            NodeMeta(name="node-a"),
            limiter=limiter or TokenBucket(rate=1000, burst=1000),
            cycle_runner=cycle_runner or (lambda lister, cfg: _result()),
        )
        server = ExporterServer(httpd)
        server.start()
        servers.append(server)
        host, port = server.address
        return server, f"http://{host}:{port}"

    yield _start

    for server in servers:
        server.shutdown()


@pytest.mark.unit
class TestEndpoints:

    def test_healthz(self, running_server):
        _, url = running_server()

        response = _get(f"{url}/healthz")

        assert response.status_code == 200
        assert response.text == "OK\n"

    def test_metrics(self, running_server):
        _, url = running_server()

        response = _get(f"{url}/metrics")

        assert response.status_code == 200
        assert response.headers["Content-Type"].startswith("text/plain")
        samples = [
            sample
            for family in text_string_to_metric_families(response.text)
            for sample in family.samples
            if sample.name == "pod_netstat_rx_bytes_total"
        ]
        assert len(samples) == 1
        assert samples[0].labels == {
            "namespace": "shop",
            "pod": "web",
            "node": "node-a",
            "region": "",
            "zone": "",
            "interface": "eth0",
        }
        assert samples[0].value == 1000
        assert "pod_netstat_pods" in response.text

    def test_each_scrape_runs_a_new_cycle(self, running_server):
        calls = []

        def runner(lister, config):
            calls.append(1)
            return _result()

        _, url = running_server(cycle_runner=runner)
        _get(f"{url}/metrics")
        _get(f"{url}/metrics")

        assert len(calls) == 2

    def test_collection_failure_is_500(self, running_server):
        def runner(lister, config):
            raise CollectionError("error getting pod list: kubelet down")

        _, url = running_server(cycle_runner=runner)

        response = _get(f"{url}/metrics")

        assert response.status_code == 500
        assert "kubelet down" in response.text

    def test_unexpected_collection_error_is_500(self, running_server):
        def runner(lister, config):
            raise RuntimeError("resolver bug")

        _, url = running_server(cycle_runner=runner)

        response = _get(f"{url}/metrics")

        assert response.status_code == 500
        assert "resolver bug" in response.text

    def test_server_keeps_serving_after_unexpected_error(self, running_server):
        calls = []

        def runner(lister, config):
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("transient")
            return _result()

        _, url = running_server(cycle_runner=runner)

        assert _get(f"{url}/metrics").status_code == 500
        assert _get(f"{url}/metrics").status_code == 200

    def test_rate_limited_scrape_is_429(self, running_server):
        _, url = running_server(limiter=TokenBucket(rate=0.001, burst=1))

        first = _get(f"{url}/metrics")
        second = _get(f"{url}/metrics")

        assert first.status_code == 200
        assert second.status_code == 429

    def test_healthz_is_not_rate_limited(self, running_server):
        _, url = running_server(limiter=TokenBucket(rate=0.001, burst=1))
        _get(f"{url}/metrics")

        assert _get(f"{url}/healthz").status_code == 200

    def test_unknown_path_is_404(self, running_server):
        _, url = running_server()

        assert _get(f"{url}/other").status_code == 404


@pytest.mark.unit
class TestServerLifecycle:

    def test_create_server_uses_configured_limits(self, tmp_path):
        config = ExporterConfig(
            bind_host="127.0.0.1", bind_port=0, rate_limit=2.0, rate_burst=4, host_mount_path=tmp_path
        )

        server = create_server(config, FakeLister(), NodeMeta())
        try:
            assert server.httpd.limiter.rate == 2.0
            assert server.httpd.limiter.burst == 4
            assert server.address[1] > 0
        finally:
            server.httpd.server_close()

    def test_shutdown_waits_for_in_flight_scrape(self, running_server):
        started = threading.Event()
        release = threading.Event()

        def slow_runner(lister, config):
            started.set()
            release.wait(5)
            return _result()

        server, url = running_server(cycle_runner=slow_runner)
        responses = []
        client = threading.Thread(target=lambda: responses.append(_get(f"{url}/metrics")))
        client.start()
        assert started.wait(5)

        stopper = threading.Thread(target=server.shutdown)
        stopper.start()
        release.set()
        stopper.join(10)
        client.join(10)

        assert responses and responses[0].status_code == 200

    def test_double_start_is_an_error(self, running_server):
        server, _ = running_server()

        with pytest.raises(RuntimeError):
            server.start()


@pytest.mark.unit
class TestAddressFamily:

    @pytest.mark.parametrize(
        "host,family",
        [
            ("", socket.AF_INET),
            ("0.0.0.0", socket.AF_INET),
            ("127.0.0.1", socket.AF_INET),
            ("localhost", socket.AF_INET),
            ("::", socket.AF_INET6),
            ("::1", socket.AF_INET6),
        ],
    )
    def test_family_follows_host(self, host, family):
        assert address_family_for(host) == family

    def test_ipv6_loopback_bind(self, tmp_path):
        config = ExporterConfig(bind_host="::1", bind_port=0, host_mount_path=tmp_path)
        try:
            server = create_server(config, FakeLister(), NodeMeta())
        except OSError as e:
            pytest.skip(f"IPv6 loopback unavailable: {e}")
        try:
            assert server.httpd.socket.family == socket.AF_INET6
            assert server.address[0] == "::1"
        finally:
            server.httpd.server_close()
