"""
Parsers for the kernel's network counter tables.

- /proc/<pid>/net/dev: one line per interface with receive and transmit
  device counters, preceded by a two-line column header.
- /proc/<pid>/net/snmp and /proc/<pid>/net/netstat: protocol counters as
  pairs of lines, a header line of counter names and a value line, both
  prefixed with the protocol name ("Tcp:", "TcpExt:", ...).

Parsers never fail on a single bad line. Malformed lines are skipped and
counted so the caller can report them.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ..models.stats import InterfaceStats

logger = logging.getLogger(__name__)

# Kernel column names of /proc/net/dev -> InterfaceStats field suffix.
_DEV_COLUMN_ALIASES = {
    "bytes": "bytes",
    "packets": "packets",
    "errs": "errors",
    "drop": "dropped",
    "fifo": "fifo",
    "frame": "frame",
    "compressed": "compressed",
    "multicast": "multicast",
    "colls": "collisions",
    "carrier": "carrier",
}

# Column layout of every kernel since 2.6, used when the header is unusable.
DEFAULT_DEV_COLUMNS: Tuple[str, ...] = (
    "rx_bytes", "rx_packets", "rx_errors", "rx_dropped",
    "rx_fifo", "rx_frame", "rx_compressed", "rx_multicast",
    "tx_bytes", "tx_packets", "tx_errors", "tx_dropped",
    "tx_fifo", "tx_collisions", "tx_carrier", "tx_compressed",
)

_KNOWN_COUNTERS = frozenset(InterfaceStats.counter_names())


@dataclass
class ParseResult:
    """Output of one table parse plus the lines that had to be skipped."""

    values: Dict = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)


def parse_dev_header(header_line: str) -> Optional[List[str]]:
    """
    Map the column header of /proc/net/dev to InterfaceStats field names.

    The header looks like:
        " face |bytes    packets errs ...|bytes    packets errs ..."

    Unknown kernel columns map to None so their values are ignored while
    keeping later columns aligned.

    Returns:
        Ordered field names (None for unknown columns), or None when the
        header cannot be interpreted.
    """
    sections = header_line.split("|")
    if len(sections) < 3:
        return None

    columns: List[Optional[str]] = []
    for direction, section in (("rx", sections[1]), ("tx", sections[2])):
        for name in section.split():
            alias = _DEV_COLUMN_ALIASES.get(name.strip().lower())
            column = f"{direction}_{alias}" if alias else None
            columns.append(column if column in _KNOWN_COUNTERS else None)

    if not any(columns):
        return None
    return columns


def parse_net_dev(content: str) -> ParseResult:
    """
    Parse the contents of /proc/<pid>/net/dev.

    Returns:
        ParseResult whose values map interface name -> InterfaceStats.
    """
    result = ParseResult()
    lines = content.splitlines()
    if len(lines) < 2:
        return result

    columns = parse_dev_header(lines[1])
    if columns is None:
        logger.debug("Unrecognised /proc/net/dev header, assuming the default column order")
        columns = list(DEFAULT_DEV_COLUMNS)

    for line in lines[2:]:
        if not line.strip():
            continue
        name, sep, data = line.rpartition(":")
        name = name.strip()
        if not sep or not name:
            result.skipped.append(line)
            continue

        try:
            values = [int(value) for value in data.split()]
        except ValueError:
            result.skipped.append(line)
            continue
        if any(value < 0 for value in values):
            result.skipped.append(line)
            continue

        counters = {
            column: value
            for column, value in zip(columns, values)
            if column is not None
        }
        result.values[name] = InterfaceStats(**counters)

    return result


def _protocol_lines(content: str) -> Iterable[Tuple[str, List[str]]]:
    for line in content.splitlines():
        if not line.strip():
            continue
        protocol, sep, rest = line.partition(":")
        if not sep:
            yield "", [line]
            continue
        yield protocol.strip(), rest.split()


def parse_protocol_counters(content: str) -> ParseResult:
    """
    Parse /proc/<pid>/net/snmp or /proc/<pid>/net/netstat.

    Header and value lines are paired per protocol. Extra fields on either
    line are ignored. Negative values (e.g. Tcp MaxConn -1) are not counters
    and are left out.

    Returns:
        ParseResult whose values map protocol -> counter name -> value.
    """
    result = ParseResult()
    pending: Optional[Tuple[str, List[str]]] = None

    for protocol, fields_ in _protocol_lines(content):
        if not protocol:
            result.skipped.extend(fields_)
            pending = None
            continue

        if pending is None or pending[0] != protocol:
            if pending is not None:
                result.skipped.append(f"{pending[0]}: {' '.join(pending[1])}")
            pending = (protocol, fields_)
            continue

        names = pending[1]
        pending = None
        try:
            values = [int(value) for value in fields_]
        except ValueError:
            result.skipped.append(f"{protocol}: {' '.join(fields_)}")
            continue

        counters = result.values.setdefault(protocol, {})
        for name, value in zip(names, values):
            if value >= 0:
                counters[name] = value

    if pending is not None:
        result.skipped.append(f"{pending[0]}: {' '.join(pending[1])}")

    return result
