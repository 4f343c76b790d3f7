"""
Container runtime integration: resolves container ids to anchor pids.
"""

from .resolver import (
    candidate_patterns,
    find_pid_file,
    read_pid_file,
    resolve_container_pid,
    select_single_match,
)
from .schemes import (
    DEFAULT_CONTAINERD_STATE_DIR,
    KNOWN_SCHEMES,
    ParsedContainerRef,
    RuntimeScheme,
    ShimLayout,
    parse_container_ref,
)

__all__ = [
    "candidate_patterns",
    "find_pid_file",
    "read_pid_file",
    "resolve_container_pid",
    "select_single_match",
    "DEFAULT_CONTAINERD_STATE_DIR",
    "KNOWN_SCHEMES",
    "ParsedContainerRef",
    "RuntimeScheme",
    "ShimLayout",
    "parse_container_ref",
]
