"""
Network namespace counter collection from procfs.
"""

from .collector import collect_namespace_stats, net_dir
from .parsers import ParseResult, parse_net_dev, parse_protocol_counters

__all__ = [
    "collect_namespace_stats",
    "net_dir",
    "ParseResult",
    "parse_net_dev",
    "parse_protocol_counters",
]
