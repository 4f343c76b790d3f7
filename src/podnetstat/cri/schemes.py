"""
Container runtime schemes and their shim state layouts.

A container reference reported by the kubelet looks like
`containerd://<id>`. The scheme prefix selects which runtime wrote the
container's state and therefore where its anchor pid file lives. Each
runtime lists its shim generations newest first.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CONTAINERD_STATE_DIR = "/var/run/containerd"

# Kubernetes' containerd namespace.
CONTAINERD_K8S_NAMESPACE = "k8s.io"


@dataclass(frozen=True)
class ShimLayout:
    """
    Where one runtime shim generation keeps a container's pid file.

    The pid file path is `<host mount>/<directory>/<container id>/<leaf>`.
    `directory` may reference `{state_root}`, the runtime's state directory.
    """

    name: str
    directory: str
    leaf: str

    def base_directory(self, state_root: str) -> str:
        return self.directory.format(state_root=state_root.rstrip("/"))


CONTAINERD_LAYOUTS: Tuple[ShimLayout, ...] = (
    ShimLayout(
        name="containerd-shim-v2",
        directory="{state_root}/io.containerd.runtime.v2.task/" + CONTAINERD_K8S_NAMESPACE,
        leaf="init.pid",
    ),
    ShimLayout(
        name="containerd-shim-v1",
        directory="{state_root}/io.containerd.runtime.v1.linux/" + CONTAINERD_K8S_NAMESPACE,
        leaf="init.pid",
    ),
)

CRIO_LAYOUTS: Tuple[ShimLayout, ...] = (
    ShimLayout(
        name="cri-o-conmon",
        directory="/var/run/containers/storage/overlay-containers",
        leaf="userdata/pidfile",
    ),
)


@dataclass(frozen=True)
class RuntimeScheme:
    """A recognised container runtime and the layouts it writes."""

    name: str
    prefix: str
    layouts: Tuple[ShimLayout, ...]


CONTAINERD = RuntimeScheme(name="containerd", prefix="containerd://", layouts=CONTAINERD_LAYOUTS)
CRIO = RuntimeScheme(name="cri-o", prefix="cri-o://", layouts=CRIO_LAYOUTS)

# Order matters: unknown schemes try every layout in this order.
KNOWN_SCHEMES: Tuple[RuntimeScheme, ...] = (CONTAINERD, CRIO)
DEFAULT_SCHEME = CONTAINERD


@dataclass(frozen=True)
class ParsedContainerRef:
    """
    A container reference split into runtime and raw id.

    `scheme` is None when the reference carried a prefix no known runtime
    claims; `layouts` then covers every known runtime.
    """

    original: str
    raw_id: str
    scheme: Optional[RuntimeScheme]
    layouts: Tuple[ShimLayout, ...]


def all_layouts() -> Tuple[ShimLayout, ...]:
    return tuple(layout for scheme in KNOWN_SCHEMES for layout in scheme.layouts)


def parse_container_ref(container_ref: str) -> ParsedContainerRef:
    """
    Strip the runtime scheme from a container reference.

    Examples:
        containerd://abc -> raw id "abc", containerd layouts
        abc              -> raw id "abc", default (containerd) layouts
        docker://abc     -> raw id "abc", every known layout
    """
    for scheme in KNOWN_SCHEMES:
        if container_ref.startswith(scheme.prefix):
            return ParsedContainerRef(
                original=container_ref,
                raw_id=container_ref[len(scheme.prefix):],
                scheme=scheme,
                layouts=scheme.layouts,
            )

    if "://" in container_ref:
        prefix, _, raw_id = container_ref.partition("://")
        logger.debug(
            f"Unknown runtime scheme '{prefix}://' in {container_ref}, trying all known layouts"
        )
        return ParsedContainerRef(
            original=container_ref, raw_id=raw_id, scheme=None, layouts=all_layouts()
        )

    return ParsedContainerRef(
        original=container_ref,
        raw_id=container_ref,
        scheme=DEFAULT_SCHEME,
        layouts=DEFAULT_SCHEME.layouts,
    )
