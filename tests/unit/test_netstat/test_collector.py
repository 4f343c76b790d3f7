"""
Unit tests for namespace statistics collection from a fake host procfs.
"""

import pytest

from conftest import NET_DEV_HEADER, SAMPLE_NET_DEV
from podnetstat.errors import ReadError
from podnetstat.models import InterfaceStats, NamespaceStats
from podnetstat.netstat import collect_namespace_stats
from podnetstat.netstat.collector import net_dir


@pytest.mark.unit
class TestCollectNamespaceStats:

    def test_net_dir_is_under_host_mount(self, host_root):
        assert net_dir(host_root, 4821) == host_root / "proc" / "4821" / "net"

    def test_collects_interfaces_and_protocols(self, host_fs, host_root):
        host_fs.proc_net(4821)

        stats = collect_namespace_stats(host_root, 4821)

        assert isinstance(stats, NamespaceStats)
        assert set(stats.interfaces) == {"lo", "eth0"}
        assert stats.interfaces["eth0"].rx_bytes == 1000
        assert stats.interfaces["eth0"].tx_bytes == 2000
        assert stats.tcp_retransmits == 7
        assert stats.protocol_counter("TcpExt", "ListenDrops") == 4
        assert stats.skipped_lines == 0

    def test_missing_protocol_tables_are_optional(self, host_fs, host_root):
        host_fs.proc_net(10, snmp=None, netstat=None)

        stats = collect_namespace_stats(host_root, 10)

        assert set(stats.interfaces) == {"lo", "eth0"}
        assert dict(stats.protocols) == {}
        assert stats.tcp_retransmits == 0

    def test_missing_dev_table_is_an_error(self, host_fs, host_root):
        host_fs.proc_net(11, dev=None)

        with pytest.raises(ReadError) as exc_info:
            collect_namespace_stats(host_root, 11)

        assert exc_info.value.pid == 11
        assert exc_info.value.kind == ReadError.UNREADABLE

    def test_vanished_process_is_an_error(self, host_root):
        with pytest.raises(ReadError):
            collect_namespace_stats(host_root, 999999)

    def test_unreadable_protocol_table_is_an_error(self, host_fs, host_root):
        net = host_fs.proc_net(12, snmp=None)
        (net / "snmp").mkdir()

        with pytest.raises(ReadError):
            collect_namespace_stats(host_root, 12)

    def test_skipped_lines_are_counted(self, host_fs, host_root):
        host_fs.proc_net(13, dev=SAMPLE_NET_DEV + "broken\n", netstat="TcpExt: Orphan\n")

        stats = collect_namespace_stats(host_root, 13)

        assert stats.skipped_lines == 2
        assert set(stats.interfaces) == {"lo", "eth0"}

    def test_result_is_immutable(self, host_fs, host_root):
        host_fs.proc_net(14)

        stats = collect_namespace_stats(host_root, 14)

        with pytest.raises(TypeError):
            stats.interfaces["eth1"] = InterfaceStats()
        with pytest.raises(TypeError):
            stats.protocols["Tcp"]["RetransSegs"] = 0

    def test_repeated_reads_are_independent(self, host_fs, host_root):
        net = host_fs.proc_net(15, snmp=None, netstat=None)
        first = collect_namespace_stats(host_root, 15)

        (net / "dev").write_text(NET_DEV_HEADER + "  eth0: 5000 50 0 0 0 0 0 0 6000 60 0 0 0 0 0 0\n")
        second = collect_namespace_stats(host_root, 15)

        assert first.interfaces["eth0"].rx_bytes == 1000
        assert second.interfaces["eth0"].rx_bytes == 5000
        assert set(second.interfaces) == {"eth0"}
