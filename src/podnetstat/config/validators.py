"""
Configuration validation.

Turns the merged raw configuration into an ExporterConfig, applying
defaults and range checks.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import ExporterConfig, KubeletConfig, MetricsConfig
from ..validation import (
    ValidationError,
    validate_bind_address,
    validate_boolean,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_string_list,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["trace", "debug", "info", "warning", "error", "critical"]


def validate_kubelet_config(kubelet_data: Dict[str, Any]) -> KubeletConfig:
    """
    Validate the [kubelet] section.

    Raises:
        ValidationError: If validation fails
    """
    defaults = KubeletConfig()

    api_port = validate_positive_integer(
        kubelet_data.get("api_port", defaults.api_port),
        min_value=1,
        max_value=65535,
        field_name="kubelet.api_port",
    )

    api_host = str(kubelet_data.get("api_host", defaults.api_host)).strip()
    if not api_host:
        raise ValidationError("kubelet.api_host must be a non-empty string",
                              field_name="kubelet.api_host", value=api_host)

    insecure_skip_verify = validate_boolean(
        kubelet_data.get("insecure_skip_verify", defaults.insecure_skip_verify),
        field_name="kubelet.insecure_skip_verify",
    )

    timeout = validate_positive_float(
        kubelet_data.get("timeout", defaults.timeout),
        min_value=0.1,
        max_value=300.0,
        field_name="kubelet.timeout",
    )

    return KubeletConfig(
        api_port=api_port,
        api_host=api_host,
        insecure_skip_verify=insecure_skip_verify,
        node_name=str(kubelet_data.get("node_name", defaults.node_name)).strip(),
        timeout=timeout,
    )


def validate_metrics_config(metrics_data: Dict[str, Any]) -> MetricsConfig:
    """
    Validate the [metrics] section.

    Raises:
        ValidationError: If validation fails
    """
    exclude_interfaces = validate_string_list(
        metrics_data.get("exclude_interfaces", []),
        field_name="metrics.exclude_interfaces",
    )
    protocol_counters = validate_string_list(
        metrics_data.get("protocol_counters", []),
        field_name="metrics.protocol_counters",
    )
    for entry in protocol_counters:
        protocol, sep, counter = entry.partition(".")
        if not sep or not protocol or not counter:
            raise ValidationError(
                f"metrics.protocol_counters entries must look like 'Tcp.RetransSegs', got {entry}",
                field_name="metrics.protocol_counters",
                value=entry,
            )
    return MetricsConfig(exclude_interfaces=exclude_interfaces, protocol_counters=protocol_counters)


def validate_exporter_config(raw: Dict[str, Dict[str, Any]]) -> ExporterConfig:
    """
    Validate the merged configuration and build an ExporterConfig.

    Args:
        raw: Configuration by section ("exporter", "kubelet", "metrics")

    Returns:
        Validated ExporterConfig instance

    Raises:
        ValidationError: If validation fails
    """
    exporter_data = raw.get("exporter", {})
    defaults = ExporterConfig()

    log_level = validate_enum_choice(
        exporter_data.get("log_level", defaults.log_level),
        choices=LOG_LEVELS,
        field_name="exporter.log_level",
        case_sensitive=False,
    )

    rate_limit = validate_positive_float(
        exporter_data.get("rate_limit", defaults.rate_limit),
        min_value=0.001,
        max_value=10000.0,
        field_name="exporter.rate_limit",
    )

    rate_burst = validate_positive_integer(
        exporter_data.get("rate_burst", defaults.rate_burst),
        min_value=1,
        max_value=1000,
        field_name="exporter.rate_burst",
    )

    bind_host, bind_port = validate_bind_address(
        exporter_data.get("bind_address", defaults.bind_address),
        field_name="exporter.bind_address",
    )

    host_mount_path = str(exporter_data.get("host_mount_path", defaults.host_mount_path)).strip()
    if not host_mount_path:
        raise ValidationError("exporter.host_mount_path must not be empty",
                              field_name="exporter.host_mount_path", value=host_mount_path)
    if not Path(host_mount_path).is_dir():
        logger.warning(f"Host mount path {host_mount_path} does not exist or is not a directory")

    containerd_state_dir = str(
        exporter_data.get("containerd_state_dir", defaults.containerd_state_dir)
    ).strip()
    if not containerd_state_dir.startswith("/"):
        raise ValidationError(
            f"exporter.containerd_state_dir must be an absolute path, got {containerd_state_dir}",
            field_name="exporter.containerd_state_dir",
            value=containerd_state_dir,
        )

    max_workers = validate_positive_integer(
        exporter_data.get("max_workers", defaults.max_workers),
        min_value=1,
        max_value=256,
        field_name="exporter.max_workers",
    )

    require_node_meta = validate_boolean(
        exporter_data.get("require_node_meta", defaults.require_node_meta),
        field_name="exporter.require_node_meta",
    )

    return ExporterConfig(
        log_level=log_level,
        rate_limit=rate_limit,
        rate_burst=rate_burst,
        bind_host=bind_host,
        bind_port=bind_port,
        host_mount_path=Path(host_mount_path),
        containerd_state_dir=containerd_state_dir,
        max_workers=max_workers,
        require_node_meta=require_node_meta,
        kubelet=validate_kubelet_config(raw.get("kubelet", {})),
        metrics=validate_metrics_config(raw.get("metrics", {})),
    )
