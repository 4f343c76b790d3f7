"""
Error taxonomy for pod network statistics collection.

Per-pod errors (NotFoundError, AmbiguousError, ReadError) are recovered by the
collection orchestrator and only shrink the result set. CollectionError is the
single condition that aborts a whole collection cycle.
"""

from pathlib import Path
from typing import Optional, Sequence, Union


class PodNetstatError(Exception):
    """Base class for all exporter errors."""


class ResolveError(PodNetstatError):
    """Base class for container-to-process resolution failures."""


class NotFoundError(ResolveError):
    """No runtime shim state file matches the container id."""

    def __init__(self, container_ref: str):
        super().__init__(f"unable to find container: {container_ref}")
        self.container_ref = container_ref


class AmbiguousError(ResolveError):
    """More than one runtime shim state file matches a single candidate layout."""

    def __init__(self, container_ref: str, matches: Sequence[Union[str, Path]]):
        self.container_ref = container_ref
        self.matches = sorted(str(match) for match in matches)
        super().__init__(
            f"container {container_ref} matches {len(self.matches)} state files: "
            f"{', '.join(self.matches)}"
        )


class ReadError(PodNetstatError):
    """
    A filesystem entry exists but cannot be read or parsed.

    Attributes:
        path: The file that failed.
        kind: "unreadable" when the file could not be read at all,
              "invalid_content" when it was read but could not be parsed.
        pid: The process whose namespace was being read, if known.
        cause: The underlying exception, if any.
    """

    UNREADABLE = "unreadable"
    INVALID_CONTENT = "invalid_content"

    def __init__(
        self,
        path: Union[str, Path],
        kind: str,
        detail: str,
        pid: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        self.path = str(path)
        self.kind = kind
        self.pid = pid
        self.cause = cause
        prefix = f"pid {pid}: " if pid is not None else ""
        super().__init__(f"{prefix}{kind} {self.path}: {detail}")


class CollectionError(PodNetstatError):
    """The pod list could not be obtained, so no partial result is possible."""


class KubeletError(PodNetstatError):
    """A kubelet or Kubernetes API request failed."""
