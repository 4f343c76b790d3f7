"""
Container-to-process resolution.

Maps a runtime-qualified container reference to the pid that anchors the
container's network namespace by locating the pid file the runtime shim
writes under its state directory. The host filesystem is reached through the
host mount prefix, since the exporter runs in its own mount namespace.

Candidates are tried in shim generation priority order:
- zero matches moves on to the next candidate,
- exactly one match is read and returned,
- more than one match fails with AmbiguousError without trying lower
  priority candidates.
"""

import glob
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..errors import AmbiguousError, NotFoundError, ReadError
from .schemes import DEFAULT_CONTAINERD_STATE_DIR, ShimLayout, parse_container_ref

logger = logging.getLogger(__name__)

# Length of a full containerd / CRI-O container id (hex sha256).
FULL_ID_LENGTH = 64


def id_pattern(raw_id: str) -> str:
    """
    Glob pattern for the id path segment.

    A full id is matched literally, a shorter one as a prefix.
    """
    escaped = glob.escape(raw_id)
    if len(raw_id) < FULL_ID_LENGTH:
        return escaped + "*"
    return escaped


def candidate_patterns(
    host_mount_path: Union[str, Path],
    raw_id: str,
    layouts: Sequence[ShimLayout],
    state_root: str = DEFAULT_CONTAINERD_STATE_DIR,
) -> List[Tuple[ShimLayout, str]]:
    """
    Build the ordered glob patterns for every candidate layout.

    Returns:
        (layout, pattern) pairs in priority order.
    """
    host = str(host_mount_path)
    patterns = []
    for layout in layouts:
        base = os.path.join(host, layout.base_directory(state_root).lstrip("/"))
        pattern = os.path.join(glob.escape(base), id_pattern(raw_id), glob.escape(layout.leaf))
        patterns.append((layout, pattern))
    return patterns


def select_single_match(container_ref: str, matches: Sequence[str]) -> Optional[str]:
    """
    Apply the no-match / single-match / ambiguous policy to one candidate.

    Returns:
        The matched path, or None when there is no match.

    Raises:
        AmbiguousError: If more than one path matched.
    """
    if not matches:
        return None
    if len(matches) > 1:
        raise AmbiguousError(container_ref, matches)
    return matches[0]


def read_pid_file(path: Union[str, Path]) -> int:
    """
    Read the anchor pid from a shim pid file.

    The first non-empty line must be a positive decimal integer.

    Raises:
        ReadError: With kind "unreadable" if the file cannot be read, or
                   "invalid_content" if it does not hold a pid.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()
    except OSError as e:
        raise ReadError(path, ReadError.UNREADABLE, str(e), cause=e) from e

    first_line = next((line.strip() for line in content.splitlines() if line.strip()), "")
    if not first_line:
        raise ReadError(path, ReadError.INVALID_CONTENT, "no pid found for container")

    # int() would also take signs, underscores and non-ASCII digits.
    if not (first_line.isascii() and first_line.isdigit()):
        raise ReadError(path, ReadError.INVALID_CONTENT, f"invalid pid '{first_line}'")

    pid = int(first_line)
    if pid <= 0:
        raise ReadError(path, ReadError.INVALID_CONTENT, f"invalid pid '{first_line}'")
    return pid


def find_pid_file(
    host_mount_path: Union[str, Path],
    container_ref: str,
    state_root: str = DEFAULT_CONTAINERD_STATE_DIR,
) -> str:
    """
    Locate the pid file of a container without reading it.

    Raises:
        NotFoundError: If no candidate layout matches.
        AmbiguousError: If a candidate layout matches more than one file.
    """
    parsed = parse_container_ref(container_ref)
    if not parsed.raw_id or "/" in parsed.raw_id:
        raise NotFoundError(container_ref)

    for layout, pattern in candidate_patterns(
        host_mount_path, parsed.raw_id, parsed.layouts, state_root
    ):
        logger.debug(f"Looking for the pid of {parsed.raw_id} with {layout.name}: {pattern}")
        selected = select_single_match(container_ref, sorted(glob.glob(pattern)))
        if selected is not None:
            logger.debug(f"Found pid file for {parsed.raw_id}: {selected}")
            return selected

    raise NotFoundError(container_ref)


def resolve_container_pid(
    host_mount_path: Union[str, Path],
    container_ref: str,
    state_root: str = DEFAULT_CONTAINERD_STATE_DIR,
) -> int:
    """
    Resolve a container reference to the pid anchoring its network namespace.

    Args:
        host_mount_path: Where the node's root filesystem is mounted.
        container_ref: Runtime-qualified container id, e.g. "containerd://<hex>".
        state_root: containerd's state directory on the node.

    Returns:
        The anchor process id.

    Raises:
        NotFoundError, AmbiguousError, ReadError
    """
    pid_file = find_pid_file(host_mount_path, container_ref, state_root)
    pid = read_pid_file(pid_file)
    logger.debug(f"Container {container_ref} has pid {pid}")
    return pid
