"""
Configuration loading utilities.

Configuration is layered, later layers winning:
defaults <- TOML file <- environment variables <- command-line flags.
Each layer is a nested dictionary with the `exporter`, `kubelet` and
`metrics` sections of the TOML file.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from ..models.config import ExporterConfig
from ..validation import ErrorSeverity, handle_config_error
from .validators import validate_exporter_config

logger = logging.getLogger(__name__)

CONFIG_SECTIONS = ("exporter", "kubelet", "metrics")

# Environment variable -> (section, key)
ENV_VARIABLES: Dict[str, Tuple[str, str]] = {
    "LOG_LEVEL": ("exporter", "log_level"),
    "RATE_LIMIT": ("exporter", "rate_limit"),
    "RATE_BURST": ("exporter", "rate_burst"),
    "BIND_ADDRESS": ("exporter", "bind_address"),
    "HOST_MOUNT_PATH": ("exporter", "host_mount_path"),
    "CONTAINERD_STATE_DIR": ("exporter", "containerd_state_dir"),
    "MAX_WORKERS": ("exporter", "max_workers"),
    "REQUIRE_NODE_META": ("exporter", "require_node_meta"),
    "KUBELET_API_PORT": ("kubelet", "api_port"),
    "KUBELET_API_HOST": ("kubelet", "api_host"),
    "KUBELET_API_INSECURE_SKIP_VERIFY": ("kubelet", "insecure_skip_verify"),
    "KUBELET_TIMEOUT": ("kubelet", "timeout"),
    "NODE_NAME": ("kubelet", "node_name"),
    "EXCLUDE_INTERFACES": ("metrics", "exclude_interfaces"),
    "PROTOCOL_COUNTERS": ("metrics", "protocol_counters"),
}


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Dict[str, Any]]:
    """Collect configuration values set through environment variables."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Dict[str, Any]] = {section: {} for section in CONFIG_SECTIONS}
    for variable, (section, key) in ENV_VARIABLES.items():
        if variable in environ:
            overrides[section][key] = environ[variable]
    return overrides


def merge_layers(*layers: Mapping[str, Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Merge configuration layers section by section; later layers win.

    Values of None are treated as unset.
    """
    merged: Dict[str, Dict[str, Any]] = {section: {} for section in CONFIG_SECTIONS}
    for layer in layers:
        for section, values in layer.items():
            if section not in merged:
                logger.warning(f"Ignoring unknown configuration section [{section}]")
                continue
            merged[section].update({k: v for k, v in values.items() if v is not None})
    return merged


def load_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ExporterConfig:
    """
    Build and validate the exporter configuration.

    Args:
        config_path: Optional TOML file.
        cli_overrides: Values given on the command line, by section.
        environ: Environment to read; defaults to os.environ.

    Returns:
        A validated ExporterConfig.

    Raises:
        FileNotFoundError: If `config_path` is given but missing.
        ValidationError: If a value is invalid.
    """
    file_layer: Dict[str, Any] = {}
    if config_path is not None:
        file_layer = load_toml_file(Path(config_path), "exporter configuration file")

    merged = merge_layers(file_layer, load_env_overrides(environ), cli_overrides or {})
    config = validate_exporter_config(merged)
    logger.debug(f"Loaded configuration: {config}")
    return config
